from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Iterable, List, Optional

from sync_skew_analyzer.ingest.demux import StructuralBlockError
from sync_skew_analyzer.models.blocks import BlockDelivery
from sync_skew_analyzer.models.results import BlockOutcome

if TYPE_CHECKING:
    from sync_skew_analyzer.analysis.pipeline import AcquisitionPipeline

logger = logging.getLogger(__name__)


class AcquisitionError(RuntimeError):
    """The acquisition layer reported a failure; no further blocks will arrive."""


@dataclass
class DriverReport:
    """What happened during one :meth:`BlockDriver.run`.

    stop_reason is one of ``end_of_source``, ``max_blocks``, ``stop_requested``,
    ``interrupted`` or ``acquisition_error``.
    """

    outcomes: List[BlockOutcome] = field(default_factory=list)
    rejected: List[str] = field(default_factory=list)
    stop_reason: str = "end_of_source"
    error: Optional[str] = None

    @property
    def n_processed(self) -> int:
        return len(self.outcomes)


class BlockDriver:
    """
    Serial scheduler adapter: one pipeline invocation per delivered block.

    Each invocation finishes (including its log write) before the next block is
    pulled from the source.  A malformed block is logged and skipped; the
    stream continues.  An :class:`AcquisitionError` raised by the source, an
    operator interrupt, or a stop request ends the run and stops the pipeline.
    """

    def __init__(
        self,
        pipeline: "AcquisitionPipeline",
        *,
        stop_event: Optional[threading.Event] = None,
        on_outcome: Optional[Callable[[BlockOutcome], None]] = None,
    ):
        self.pipeline = pipeline
        self.stop_event = stop_event or threading.Event()
        self.on_outcome = on_outcome

    def request_stop(self) -> None:
        self.stop_event.set()

    def run(self, source: Iterable[BlockDelivery], *, max_blocks: Optional[int] = None) -> DriverReport:
        report = DriverReport()
        if max_blocks is not None and max_blocks <= 0:
            report.stop_reason = "max_blocks"
            self.pipeline.stop()
            return report

        it = iter(source)
        delivered = 0
        try:
            while True:
                if self.stop_event.is_set():
                    report.stop_reason = "stop_requested"
                    break
                try:
                    delivery = next(it)
                except StopIteration:
                    report.stop_reason = "end_of_source"
                    break
                except AcquisitionError as e:
                    report.stop_reason = "acquisition_error"
                    report.error = str(e)
                    logger.error("Acquisition failed: %s", e)
                    break

                delivered += 1
                try:
                    outcome = self.pipeline.process(delivery)
                except StructuralBlockError as e:
                    report.rejected.append(str(e))
                    logger.warning("Block %d rejected: %s", delivered - 1, e)
                else:
                    report.outcomes.append(outcome)
                    if self.on_outcome is not None:
                        self.on_outcome(outcome)

                if max_blocks is not None and delivered >= max_blocks:
                    report.stop_reason = "max_blocks"
                    break
        except KeyboardInterrupt:
            report.stop_reason = "interrupted"
            logger.info("Acquisition interrupted by operator")
        finally:
            self.pipeline.stop()

        logger.info(
            "Run finished (%s): %d blocks processed, %d rejected",
            report.stop_reason,
            report.n_processed,
            len(report.rejected),
        )
        return report
