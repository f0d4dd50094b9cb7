"""
Diagnostic analysis of the timings collected for one byte position.

The attack engine picks the byte itself (strict running maximum); this
service only reports how clearly that byte stood out so weak results show
up in the log.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from hmac_timing.core.interfaces import ByteTimingRecord, ILogger, byte_to_hex
from hmac_timing.utils.logger import Logger
from hmac_timing.utils.stats import robust_zscore


@dataclass(frozen=True)
class PositionAnalysis:
    """
    How the selected candidate compares with the rest of the position.

    Attributes:
        best: Selected candidate byte
        best_latency: Its median latency (ms)
        runner_up: Slowest other candidate, None if there was only one
        margin: best_latency minus runner-up latency (ms)
        separation: Robust z-score of the best latency against the others
    """
    best: int
    best_latency: float
    runner_up: Optional[int]
    margin: float
    separation: float


class AnalysisService:
    """
    Reports timing margin and separation for each resolved byte.

    Example:
        >>> analyzer = AnalysisService(min_time_difference=1.0)
        >>> analysis = analyzer.analyze_position(0, records, best=0x3a)
        >>> analysis.margin
        24.7
    """

    def __init__(
        self,
        min_time_difference: float = 1.0,
        min_separation: float = 3.0,
        logger: Optional[ILogger] = None
    ):
        """
        Args:
            min_time_difference: Margin (ms) below which a warning is logged
            min_separation: Robust z-score below which a warning is logged
            logger: Logger instance
        """
        self.min_time_difference = min_time_difference
        self.min_separation = min_separation
        self.logger = logger or Logger.for_component("analysis")

    def analyze_position(
        self,
        byte_index: int,
        records: Sequence[ByteTimingRecord],
        best: int
    ) -> PositionAnalysis:
        """
        Compare the selected candidate against the other candidates.

        Raises:
            ValueError: If no records are provided or ``best`` is not among them
        """
        if not records:
            raise ValueError("No timing records provided")

        best_record = next((r for r in records if r.candidate == best), None)
        if best_record is None:
            raise ValueError(f"Candidate {byte_to_hex(best)} has no timing record")

        others = [r for r in records if r is not best_record]
        runner_up = max(others, key=lambda r: r.latency) if others else None

        margin = best_record.latency - runner_up.latency if runner_up else 0.0
        separation = robust_zscore(
            best_record.latency, [r.latency for r in others]
        )

        self.logger.info(
            f"Byte {byte_index}: selected {best_record.byte_hex} "
            f"({best_record.latency:.3f}ms)"
        )

        if runner_up:
            self.logger.info(
                f"Runner-up: {runner_up.byte_hex} "
                f"({runner_up.latency:.3f}ms, Δ={margin:.3f}ms, z={separation:.1f})"
            )

            if margin < self.min_time_difference or separation < self.min_separation:
                self.logger.warning(
                    f"Byte {byte_index} barely stands out "
                    f"(Δ={margin:.3f}ms), result may be unreliable"
                )

        return PositionAnalysis(
            best=best_record.candidate,
            best_latency=best_record.latency,
            runner_up=runner_up.candidate if runner_up else None,
            margin=margin,
            separation=separation
        )
