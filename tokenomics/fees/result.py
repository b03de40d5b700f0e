"""Fee conversion result types."""

from dataclasses import dataclass
from enum import Enum


class ConversionStatus(Enum):
    """What happened to the foreign fee buffer on a conversion attempt."""

    CONVERTED = "converted"
    DEFERRED = "deferred"
    BELOW_THRESHOLD = "below_threshold"
    NO_LIQUIDITY = "no_liquidity"


@dataclass(frozen=True)
class ConversionOutcome:
    """Result of an attempt to convert buffered foreign fees.

    Deferral is not an error: the buffer is kept and the conversion is
    retried on a later fee or maintenance cycle.

    Attributes:
        status: Outcome of the attempt
        foreign_in: Foreign sold into the pool (0 unless converted)
        native_burned: Native bought and burned (0 unless converted)
        buffer_foreign: Foreign left in the buffer afterwards
        shortfall_ppm: How far the quote fell short of the spot-implied output

    Examples:
        outcome = ConversionOutcome.deferred(buffer_foreign=10**12, shortfall_ppm=180_000)
        assert outcome.is_deferred
        assert outcome.native_burned == 0
    """

    status: ConversionStatus
    foreign_in: int = 0
    native_burned: int = 0
    buffer_foreign: int = 0
    shortfall_ppm: int = 0

    @property
    def is_converted(self) -> bool:
        return self.status is ConversionStatus.CONVERTED

    @property
    def is_deferred(self) -> bool:
        return self.status is ConversionStatus.DEFERRED

    @classmethod
    def converted(
        cls, foreign_in: int, native_burned: int, shortfall_ppm: int = 0
    ) -> "ConversionOutcome":
        return cls(
            status=ConversionStatus.CONVERTED,
            foreign_in=foreign_in,
            native_burned=native_burned,
            shortfall_ppm=shortfall_ppm,
        )

    @classmethod
    def deferred(cls, buffer_foreign: int, shortfall_ppm: int) -> "ConversionOutcome":
        return cls(
            status=ConversionStatus.DEFERRED,
            buffer_foreign=buffer_foreign,
            shortfall_ppm=shortfall_ppm,
        )

    @classmethod
    def skipped(cls, status: ConversionStatus, buffer_foreign: int) -> "ConversionOutcome":
        return cls(status=status, buffer_foreign=buffer_foreign)
