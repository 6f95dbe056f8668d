"""
Queue for enrichment work.

Uploads hand enrichment to a ``TaskQueue`` and return right away. Locally
the task runs as a FastAPI background task after the response is sent;
elsewhere it becomes a Google Cloud Tasks HTTP task that calls back into
the internal enrichment endpoint.
"""
import json
import logging
from typing import Callable, Optional

from fastapi import BackgroundTasks
from google.cloud import tasks_v2
from sqlalchemy.orm import Session

from docportal.core.config import settings
from docportal.core.enrichment import EnrichmentPipeline
from docportal.core.exceptions import ExternalServiceError
from docportal.services.file_service import FileService
from docportal.services.summarizer import Summarizer

logger = logging.getLogger(__name__)


def run_enrichment_job(
    session_factory: Callable[[], Session],
    storage: FileService,
    summarizer: Summarizer,
    document_id: int,
    file_url: Optional[str] = None,
) -> None:
    """
    Background task to enrich a document.

    Failures are recorded on the document row by the pipeline and logged
    here; they never propagate to the upload that queued the task.
    """
    db = session_factory()  # Create a new session for the background task
    try:
        logger.info(f"Starting background enrichment for document ID {document_id}")
        EnrichmentPipeline(db, storage, summarizer).run(document_id, file_url)
        logger.info(f"Completed background enrichment for document ID {document_id}")
    except Exception as e:
        logger.warning(f"Enrichment of document ID {document_id} failed: {e}")
    finally:
        db.close()


class TaskQueue:
    """Enrichment task dispatcher."""

    def __init__(
        self,
        background_tasks: BackgroundTasks,
        session_factory: Callable[[], Session],
        storage: FileService,
        summarizer: Summarizer,
        is_local: Optional[bool] = None,
    ):
        self.background_tasks = background_tasks
        self.session_factory = session_factory
        self.storage = storage
        self.summarizer = summarizer
        self.is_local = settings.ENV == "local" if is_local is None else is_local
        self._client: Optional[tasks_v2.CloudTasksClient] = None

    @property
    def client(self) -> tasks_v2.CloudTasksClient:
        if self._client is None:
            self._client = tasks_v2.CloudTasksClient()
        return self._client

    def enqueue_enrichment(self, document_id: int, file_url: str) -> str:
        """
        Queue enrichment of a document.

        Returns:
            Task name

        Raises:
            ExternalServiceError: If the task could not be queued
        """
        if self.is_local:
            logger.info(f"LOCAL ENV: Enriching document {document_id} as a background task")
            self.background_tasks.add_task(
                run_enrichment_job,
                self.session_factory,
                self.storage,
                self.summarizer,
                document_id,
                file_url,
            )
            return f"local-background-{document_id}"

        payload = {'document_id': document_id, 'file_url': file_url}
        task = {
            'http_request': {
                'http_method': tasks_v2.HttpMethod.POST,
                'url': f'{settings.BACKEND_URL}{settings.API_V1_PREFIX}/documents/internal/enrich',
                'headers': {
                    'Content-Type': 'application/json',
                    'X-Internal-Token': settings.INTERNAL_TASK_TOKEN,
                },
                'body': json.dumps(payload).encode()
            }
        }

        try:
            parent = self.client.queue_path(
                settings.GCS_PROJECT_ID, settings.GCS_LOCATION, settings.TASK_QUEUE_NAME
            )
            response = self.client.create_task(request={'parent': parent, 'task': task})
        except Exception as e:
            logger.error(f"Failed to queue enrichment for document {document_id}: {e}")
            raise ExternalServiceError(f"Failed to queue enrichment: {e}")

        logger.info(f'Created task {response.name} for document {document_id}')
        return response.name
