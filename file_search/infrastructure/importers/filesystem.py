from __future__ import annotations

import re
from pathlib import Path
from typing import Optional, Union

from ...domain.errors import DocumentImportError
from ...domain.interfaces import DocumentImporter
from ...domain.models import ImportedDocument

TEXT_EXTS = {".txt", ".text", ".md", ".markdown"}
IMAGE_EXTS = {".png", ".jpg", ".jpeg", ".heic", ".tif", ".tiff"}

_RTF_HIDDEN_GROUP = re.compile(
    r"\{\\(?:fonttbl|colortbl|stylesheet|info|\*)[^{}]*(?:\{[^{}]*\}[^{}]*)*\}"
)
_RTF_BREAK = re.compile(r"\\(?:par|line)\b ?")
_RTF_CONTROL = re.compile(r"\\[a-zA-Z]+-?\d* ?|\\'[0-9a-fA-F]{2}|[{}]")


def strip_rtf(raw: str) -> str:
    """Drop RTF groups and control words, keeping the visible text."""
    text = _RTF_HIDDEN_GROUP.sub("", raw)
    text = _RTF_BREAK.sub("\n", text)
    text = _RTF_CONTROL.sub("", text)
    return "\n".join(line.strip() for line in text.splitlines() if line.strip())


class OcrEngine:
    """Lazy RapidOCR wrapper (installed with the ``ocr`` extra)."""

    def __init__(self) -> None:
        self._engine = None
        self._init_error: Optional[str] = None

    def _ensure(self):
        if self._engine is None and self._init_error is None:
            try:
                from rapidocr_onnxruntime import RapidOCR  # type: ignore

                self._engine = RapidOCR()
            except Exception as e:  # import or model load failure
                self._init_error = str(e)
        return self._engine

    @property
    def available(self) -> bool:
        return self._ensure() is not None

    def image_to_text(self, image_path: Union[str, Path]) -> str:
        engine = self._ensure()
        if engine is None:
            raise DocumentImportError(f"OCR backend unavailable: {self._init_error}")
        # RapidOCR returns (result, elapsed); result rows are [box, text, score]
        result, _ = engine(str(image_path))
        lines = [str(item[1]) for item in (result or []) if item and len(item) > 1 and item[1]]
        return "\n".join(lines).strip()


class FileSystemDocumentImporter(DocumentImporter):
    """Reads text, markdown, rtf, pdf, docx and (with OCR) images from disk."""

    def __init__(self, ocr: Optional[OcrEngine] = None) -> None:
        self.ocr = ocr or OcrEngine()

    def import_document(self, path: Union[str, Path]) -> ImportedDocument:
        p = Path(path)
        try:
            st = p.stat()
        except OSError as exc:
            raise DocumentImportError(f"Cannot stat {p}: {exc}") from exc

        ext = p.suffix.lower()
        try:
            if ext in TEXT_EXTS:
                text = p.read_text(encoding="utf-8", errors="ignore")
            elif ext == ".rtf":
                text = strip_rtf(p.read_text(encoding="utf-8", errors="ignore"))
            elif ext == ".pdf":
                text = self._extract_pdf(p)
            elif ext == ".docx":
                text = self._extract_docx(p)
            elif ext in IMAGE_EXTS:
                text = self.ocr.image_to_text(p)
            else:
                text = p.read_text(encoding="utf-8", errors="ignore")
        except DocumentImportError:
            raise
        except Exception as exc:
            raise DocumentImportError(f"Cannot extract text from {p}: {exc}") from exc

        return ImportedDocument(title=p.stem, extracted_text=text.strip(), last_modified=float(st.st_mtime))

    def _extract_pdf(self, path: Path) -> str:
        from pypdf import PdfReader

        reader = PdfReader(str(path))
        return "\n".join(page.extract_text() or "" for page in reader.pages)

    def _extract_docx(self, path: Path) -> str:
        import docx  # python-docx

        document = docx.Document(str(path))
        return "\n".join(par.text for par in document.paragraphs if par.text)
