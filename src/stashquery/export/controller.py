import logging
import time
from typing import Optional

from elasticsearch import Elasticsearch
from tqdm import tqdm

from stashquery.core.exceptions import ScrollExpiredError
from stashquery.core.models import ExportConfig, ExportOutcome, ExportRequest
from stashquery.export.indices import indices_for_request
from stashquery.export.sanitizer import sanitize_hit
from stashquery.export.scroll import ScrollSession
from stashquery.export.writer import BufferedWriter

logger = logging.getLogger(__name__)


class ExportController:
    """Run an export: resolve indices, scroll through the hits, write the output."""

    def __init__(self, es_client: Elasticsearch, config: Optional[ExportConfig] = None):
        self.es_client = es_client
        self.config = config or ExportConfig()

    def create_session(self, request: ExportRequest) -> ScrollSession:
        return ScrollSession(
            self.es_client,
            scroll_time=request.scroll_time,
            page_size=request.scroll_size,
            match_field=self.config.match_field,
        )

    def run(self, request: ExportRequest) -> ExportOutcome:
        """Export every hit for the request.

        The scroll session is always closed, whether the export finishes,
        fails or is interrupted. An expired scroll ends the export early with
        ``finished=False`` and the partial count; any other error propagates.

        Args:
            request: What to export

        Returns:
            ExportOutcome with the number of documents enumerated
        """
        start_time = time.time()
        writer = (
            BufferedWriter(request.output, flush_size=self.config.flush_size)
            if request.output
            else None
        )

        indices = indices_for_request(self.es_client, request)
        outcome = ExportOutcome(indices=indices)

        if not indices:
            logger.warning("None of the requested indices exist, nothing to export")
            outcome.finished = True
            if writer:
                outcome.output = writer.finish()
            return outcome

        progress = tqdm(desc="Exporting", unit="docs", disable=not self.config.progress)

        try:
            with self.create_session(request) as session:
                page = session.open(request.query_string, indices)
                outcome.total = page.total
                progress.reset(total=page.total)

                while page.hits:
                    for hit in page.hits:
                        line = sanitize_hit(hit, self.config.match_field)
                        if writer:
                            writer.write(line)
                        outcome.count += 1
                        progress.update(1)
                    page = session.next()

                outcome.finished = True
        except ScrollExpiredError as e:
            logger.error(
                f"Export aborted after {outcome.count} of {outcome.total} documents: {e}",
                extra={"doc_count": outcome.count, "total_hits": outcome.total},
            )
        finally:
            progress.close()

        if writer:
            if outcome.finished:
                outcome.output = writer.finish()
            else:
                writer.flush()

        elapsed = time.time() - start_time
        logger.info(
            f"Exported {outcome.count} documents in {elapsed:.2f}s",
            extra={
                "doc_count": outcome.count,
                "total_hits": outcome.total,
                "finished": outcome.finished,
                "elapsed_seconds": elapsed,
            },
        )
        return outcome
