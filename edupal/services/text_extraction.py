"""
Text extraction from downloaded resource files

Decoders share one contract: bytes and an optional character budget in, text
out, raise on failure.
"""
import io
import logging
import os
from typing import Callable, Dict, Optional

from docx import Document
from pypdf import PdfReader

from edupal.exceptions import (
    DocumentParseError,
    InsufficientContentError,
    UnsupportedFormatError,
)

logger = logging.getLogger(__name__)

Decoder = Callable[[bytes, Optional[int]], str]


def extract_pdf_text(data: bytes, max_chars: Optional[int] = None) -> str:
    """
    Concatenate the text layer of each page

    Stops reading pages once max_chars characters have been collected.
    """
    pages = []
    collected = 0
    try:
        reader = PdfReader(io.BytesIO(data))
        for page in reader.pages:
            text = page.extract_text() or ""
            pages.append(text)
            collected += len(text)
            if max_chars is not None and collected >= max_chars:
                logger.info(f"Stopped PDF extraction after {len(pages)} of {len(reader.pages)} pages")
                break
    except Exception as e:
        logger.error(f"PDF parsing error: {str(e)}")
        raise DocumentParseError("Failed to parse PDF text")

    logger.info(f"Extracted {collected} characters from {len(pages)} PDF pages")
    return "\n".join(pages)


def extract_docx_text(data: bytes, max_chars: Optional[int] = None) -> str:
    try:
        document = Document(io.BytesIO(data))
    except Exception as e:
        logger.error(f"DOCX parsing error: {str(e)}")
        raise DocumentParseError("Failed to parse DOCX text")

    return "\n".join(p.text for p in document.paragraphs if p.text.strip())


def extract_plain_text(data: bytes, max_chars: Optional[int] = None) -> str:
    text = data.decode("utf-8", errors="replace")

    # A NUL almost always means a binary file with an unexpected extension
    if "\x00" in text:
        raise UnsupportedFormatError(
            "AI generation currently only supports PDF, DOCX and plain text files."
        )
    return text


DECODERS: Dict[str, Decoder] = {
    ".pdf": extract_pdf_text,
    ".docx": extract_docx_text,
}


def decoder_for(file_path: str) -> Decoder:
    """Pick the decoder for a path by extension; anything unknown is read as text"""
    extension = os.path.splitext(file_path.lower())[1]
    return DECODERS.get(extension, extract_plain_text)


def extract_text(data: bytes, file_path: str, min_chars: int = 50, max_chars: int = 100_000) -> str:
    """
    Extract study text from a file

    Args:
        data: Raw file bytes
        file_path: Storage path, used only for its extension
        min_chars: Minimum stripped length accepted
        max_chars: Longer text is cut to this many characters

    Returns:
        Text ready to embed in a prompt

    Raises:
        DocumentParseError, UnsupportedFormatError, InsufficientContentError
    """
    text = decoder_for(file_path)(data, max_chars)

    if not text or len(text.strip()) < min_chars:
        raise InsufficientContentError(
            "Not enough text found in the document to generate study materials."
        )

    if len(text) > max_chars:
        logger.info(f"Truncating extracted text from {len(text)} to {max_chars} characters")
        text = text[:max_chars]

    return text
