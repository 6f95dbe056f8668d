"""
Document text extraction service.
Supports PDF, DOCX and legacy Word (.doc) files.
"""
import io
import logging
import re
import struct
from typing import Optional
import magic
import olefile
from pypdf import PdfReader
from docx import Document as DocxDocument

logger = logging.getLogger(__name__)


class DocumentExtractor:
    """Extract text content from uploaded documents."""

    SUPPORTED_MIME_TYPES = {
        "application/pdf": "PDF",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "DOCX",
        "application/msword": "DOC",
        "application/x-ole-storage": "DOC",
        "application/CDFV2": "DOC",
    }

    _OLE_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"
    # Word 97 piece table: bit 30 of a piece offset marks 8-bit cp1252 text
    _COMPRESSED_PIECE = 0x40000000
    _FIELD_CODE = re.compile("\x13[^\x13\x14\x15]*\x14")

    def detect_mime_type(self, file_bytes: bytes) -> str:
        return magic.from_buffer(file_bytes, mime=True)

    def extract_text(self, file_bytes: bytes, filename: Optional[str] = None) -> str:
        """
        Extract text from document bytes.

        Args:
            file_bytes: Raw file content as bytes
            filename: Optional filename, used as a fallback hint for DOCX
                archives that sniff as generic zip files and DOC files
                that sniff as bare OLE2 containers

        Returns:
            Extracted text content

        Raises:
            ValueError: If file type is unsupported or nothing can be read
        """
        mime_type = self.detect_mime_type(file_bytes)
        if mime_type == "application/zip" and (filename or "").lower().endswith(".docx"):
            mime_type = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
        elif file_bytes[:8] == self._OLE_SIGNATURE and (filename or "").lower().endswith(".doc"):
            mime_type = "application/msword"

        if mime_type not in self.SUPPORTED_MIME_TYPES:
            raise ValueError(
                f"Unsupported file type: {mime_type}. "
                f"Supported types: {', '.join(dict.fromkeys(self.SUPPORTED_MIME_TYPES.values()))}"
            )

        logger.info(f"Extracting text from {self.SUPPORTED_MIME_TYPES[mime_type]} file {filename or ''}")

        kind = self.SUPPORTED_MIME_TYPES[mime_type]
        if kind == "PDF":
            return self._extract_pdf(file_bytes)
        if kind == "DOC":
            return self._extract_doc(file_bytes)
        return self._extract_docx(file_bytes)

    def _extract_pdf(self, file_bytes: bytes) -> str:
        """Extract text from PDF."""
        try:
            pdf = PdfReader(io.BytesIO(file_bytes))
            text_parts = []

            for page in pdf.pages:
                page_text = page.extract_text() or ""
                if page_text.strip():
                    text_parts.append(page_text)

            return "\n\n".join(text_parts)
        except Exception as e:
            logger.error(f"PDF extraction error: {e}")
            raise ValueError(f"Failed to extract PDF: {str(e)}")

    def _extract_docx(self, file_bytes: bytes) -> str:
        """Extract text from DOCX."""
        try:
            doc = DocxDocument(io.BytesIO(file_bytes))
            paragraphs = [para.text for para in doc.paragraphs if para.text.strip()]
            return "\n\n".join(paragraphs)
        except Exception as e:
            logger.error(f"DOCX extraction error: {e}")
            raise ValueError(f"Failed to extract DOCX: {str(e)}")

    def _extract_doc(self, file_bytes: bytes) -> str:
        """Extract text from a Word 97-2003 binary file via its piece table."""
        try:
            ole = olefile.OleFileIO(io.BytesIO(file_bytes))
            try:
                word = ole.openstream("WordDocument").read()
                flags = struct.unpack_from("<H", word, 0x0A)[0]
                if flags & 0x0100:
                    raise ValueError("document is encrypted")
                table = ole.openstream("1Table" if flags & 0x0200 else "0Table").read()
            finally:
                ole.close()

            # FIB: 32-byte base, then the counted fibRgW, fibRgLw and fibRgFcLcb blocks
            csw = struct.unpack_from("<H", word, 32)[0]
            rg_lw = 32 + 2 + csw * 2 + 2
            ccp_text = struct.unpack_from("<i", word, rg_lw + 12)[0]
            cslw = struct.unpack_from("<H", word, rg_lw - 2)[0]
            rg_fc_lcb = rg_lw + cslw * 4 + 2
            fc_clx, lcb_clx = struct.unpack_from("<II", word, rg_fc_lcb + 33 * 8)

            text = self._read_pieces(word, table[fc_clx:fc_clx + lcb_clx])[:ccp_text]
        except Exception as e:
            logger.error(f"DOC extraction error: {e}")
            raise ValueError(f"Failed to extract DOC: {str(e)}")

        text = self._FIELD_CODE.sub("", text)
        text = re.sub("[\x00-\x08\x0b\x0c\x0e-\x1f]", "", text.replace("\r", "\n"))
        paragraphs = [line.strip() for line in text.split("\n") if line.strip()]
        return "\n\n".join(paragraphs)

    def _read_pieces(self, word: bytes, clx: bytes) -> str:
        pos = 0
        # Skip Prc entries (formatting) until the Pcdt holding the piece table
        while pos < len(clx) and clx[pos] == 0x01:
            cb_grpprl = struct.unpack_from("<h", clx, pos + 1)[0]
            pos += 3 + cb_grpprl
        if pos >= len(clx) or clx[pos] != 0x02:
            raise ValueError("piece table not found")

        lcb = struct.unpack_from("<I", clx, pos + 1)[0]
        plc = clx[pos + 5:pos + 5 + lcb]
        count = (lcb - 4) // 12
        cps = struct.unpack_from(f"<{count + 1}I", plc, 0)

        parts = []
        for i in range(count):
            fc = struct.unpack_from("<I", plc, (count + 1) * 4 + i * 8 + 2)[0]
            chars = cps[i + 1] - cps[i]
            if fc & self._COMPRESSED_PIECE:
                start = (fc & ~self._COMPRESSED_PIECE) // 2
                parts.append(word[start:start + chars].decode("cp1252", errors="replace"))
            else:
                parts.append(word[fc:fc + chars * 2].decode("utf-16-le", errors="replace"))
        return "".join(parts)
