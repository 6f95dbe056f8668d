"""
Post-upload enrichment: extract text and attach an AI summary.

Enrichment is best effort. It only ever writes ``parsed_text``, ``summary``
and the enrichment bookkeeping columns, so a failure leaves the document's
review status and assignments exactly as they were.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from sqlalchemy.orm import Session

from docportal.core.exceptions import DocumentNotFound, ExternalServiceError
from docportal.core.helpers.extracter import DocumentExtractor
from docportal.models.choices import EnrichmentStatus
from docportal.models.document import Document
from docportal.services.file_service import FileService
from docportal.services.summarizer import Summarizer

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 200


def preview(text: str, length: int = PREVIEW_LENGTH) -> str:
    return text[:length] + "..."


@dataclass
class EnrichmentResult:
    document_id: int
    extracted_text: str
    summary: str


class EnrichmentPipeline:
    """
    Enrichment of a single document.
    Orchestrates download, extraction, summarization and the write-back.
    """

    def __init__(
        self,
        db: Session,
        storage: FileService,
        summarizer: Summarizer,
        extractor: Optional[DocumentExtractor] = None,
    ):
        self.db = db
        self.storage = storage
        self.summarizer = summarizer
        self.extractor = extractor or DocumentExtractor()

    def _load_bytes(self, file_url: str) -> bytes:
        """Fetch bytes from storage, or over HTTP for absolute URLs."""
        if file_url.startswith(("http://", "https://")):
            try:
                response = httpx.get(file_url, timeout=60, follow_redirects=True)
                response.raise_for_status()
            except httpx.HTTPError as e:
                raise ExternalServiceError(f"Failed to download document: {e}")
            return response.content
        return self.storage.get_file_content(file_url)

    def _set_state(self, document_id: int, state: EnrichmentStatus, error: Optional[str] = None) -> None:
        doc = self.db.query(Document).filter(Document.id == document_id).first()
        if doc:
            doc.enrichment_status = state.value  # type: ignore
            doc.enrichment_error = error  # type: ignore
            self.db.commit()

    def run(self, document_id: int, file_url: Optional[str] = None) -> EnrichmentResult:
        """
        Enrich a document.

        Args:
            document_id: Document to enrich
            file_url: Storage locator; defaults to the document's own

        Returns:
            Previews of the extracted text and summary

        Raises:
            DocumentNotFound: No such document
            ExternalServiceError: Download, extraction or summarization failed
        """
        doc = self.db.query(Document).filter(Document.id == document_id).first()
        if doc is None:
            raise DocumentNotFound(document_id)

        locator = file_url or str(doc.file_url)
        filename = str(doc.file_name)
        logger.info(f"Enriching document {document_id} from '{locator}'")
        self._set_state(document_id, EnrichmentStatus.PROCESSING)

        try:
            # Step 1: Get file bytes
            file_bytes = self._load_bytes(locator)

            # Step 2: Extract text
            text = self.extractor.extract_text(file_bytes, filename)
            if not text.strip():
                raise ValueError(f"No text content extracted from '{filename}'")

            # Step 3: Summarize
            summary = self.summarizer.summarize(text)

            # Step 4: Write back
            doc = self.db.query(Document).filter(Document.id == document_id).first()
            if doc is None:
                raise DocumentNotFound(document_id)
            doc.parsed_text = text  # type: ignore
            doc.summary = summary  # type: ignore
            doc.enrichment_status = EnrichmentStatus.COMPLETED.value  # type: ignore
            doc.enrichment_error = None  # type: ignore
            self.db.commit()

        except Exception as e:
            logger.error(f"Failed to enrich document {document_id}: {e}")
            self.db.rollback()
            try:
                self._set_state(document_id, EnrichmentStatus.FAILED, str(e))
            except Exception as db_e:
                logger.error(f"Failed to record enrichment failure for document {document_id}: {db_e}")
            if isinstance(e, (DocumentNotFound, ExternalServiceError)):
                raise
            raise ExternalServiceError(str(e))

        logger.info(f"Document {document_id} enriched successfully")
        return EnrichmentResult(
            document_id=document_id,
            extracted_text=preview(text),
            summary=preview(summary),
        )
