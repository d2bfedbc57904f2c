"""Extract the text from the file."""
import json
import logging
from pathlib import Path
from typing import Optional

from docx import Document as DocxDocument

from odf import text as odf_text
from odf.opendocument import load as odf_load

import pymupdf

from indexing.errors import ExtractionSkip

logger = logging.getLogger(__name__)

BINARY_SNIFF_BYTES = 8000

LANGUAGES = {
    '.ts': 'typescript',
    '.tsx': 'typescript',
    '.js': 'javascript',
    '.jsx': 'javascript',
    '.mjs': 'javascript',
    '.py': 'python',
    '.go': 'go',
    '.rs': 'rust',
    '.java': 'java',
    '.kt': 'kotlin',
    '.rb': 'ruby',
    '.php': 'php',
    '.c': 'c',
    '.h': 'c',
    '.cpp': 'cpp',
    '.hpp': 'cpp',
    '.cs': 'csharp',
    '.swift': 'swift',
    '.sh': 'shell',
    '.md': 'markdown',
    '.ipynb': 'python',
}


def language_for(path: Path) -> str:
    """Guess the language tag from the file extension."""
    return LANGUAGES.get(Path(path).suffix.lower(), 'unknown')


def extract_pdf(pdf_path: Path) -> str:
    """Extract text from every page of a PDF."""
    with pymupdf.open(pdf_path) as doc:
        return ''.join(page.get_text() for page in doc)


def extract_docx(docx_path: Path) -> str:
    """Extract text from DOCX."""
    doc = DocxDocument(docx_path)
    return '\n'.join(para.text for para in doc.paragraphs)


def extract_odt(odt_path: Path) -> str:
    """Extract text from ODT."""
    doc = odf_load(str(odt_path))
    paragraphs = doc.getElementsByType(odf_text.P)
    return '\n'.join(str(p) for p in paragraphs)


def extract_ipynb(notebook_path: Path) -> str:
    """Join the sources of every notebook cell."""
    with open(notebook_path, 'r', encoding='utf-8') as f:
        notebook = json.load(f)
    cells = []
    for cell in notebook.get('cells', []):
        source = cell.get('source', '')
        if isinstance(source, list):
            source = ''.join(source)
        cells.append(source)
    return '\n'.join(cells)


def extract_text_file(txt_path: Path) -> str:
    """Read a plain text file, refusing anything that looks binary."""
    with open(txt_path, 'rb') as f:
        data = f.read()
    if b'\x00' in data[:BINARY_SNIFF_BYTES]:
        raise ExtractionSkip(f'Cannot read text for binary file {txt_path}')
    return data.decode('utf-8', errors='ignore')


EXTRACTORS = {
    '.pdf': extract_pdf,
    '.docx': extract_docx,
    '.odt': extract_odt,
    '.ipynb': extract_ipynb,
}


def extract_text(path: Path) -> Optional[str]:
    """Return the text worth indexing in a file, or None if there is none.

    Raises ExtractionSkip for binary files and OSError when the file
    cannot be read.
    """
    path = Path(path)
    extractor = EXTRACTORS.get(path.suffix.lower(), extract_text_file)
    text = extractor(path)
    if not text.strip():
        logger.debug('No text in %s', path)
        return None
    return text
