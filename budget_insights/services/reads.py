"""Per-read failure tolerance for store access"""

import logging
from typing import Callable, List, TypeVar

from budget_insights.domain.exceptions import PartialDataUnavailable, StoreUnavailableError
from budget_insights.infrastructure.observability.metrics import partial_data_counter

T = TypeVar("T")

logger = logging.getLogger(__name__)


class ReadTracker:
    """
    Runs independent store reads, substituting a default for each one that fails.

    Only when every read of a request failed is the store considered down
    (`raise_if_store_down`).
    """

    def __init__(self, user_id: str):
        self.user_id = user_id
        self.failures: List[PartialDataUnavailable] = []
        self.successes = 0

    def read(self, source: str, fetch: Callable[[], T], default: T) -> T:
        try:
            result = fetch()
        except StoreUnavailableError as e:
            failure = PartialDataUnavailable(source, str(e))
            self.failures.append(failure)
            partial_data_counter.labels(source=source).inc()
            logger.warning(str(failure), extra={"user_id": self.user_id, "source": source})
            return default
        self.successes += 1
        return result

    @property
    def failed_sources(self) -> List[str]:
        return [f.source for f in self.failures]

    def raise_if_store_down(self) -> None:
        if self.failures and not self.successes:
            raise StoreUnavailableError(f"All reads failed: {', '.join(self.failed_sources)}")
