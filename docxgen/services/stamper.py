from __future__ import annotations

import io
import logging

from docxtpl import DocxTemplate
from jinja2 import Environment, StrictUndefined

from ..models.row import Row

"""Document stamper: renders a docx template for one Row with docxtpl.

Placeholders are Jinja2 expressions inside the template (``{{ Name }}``,
``{{ columns['First Name'] }}``). The template bytes are read once by the
pipeline and a fresh DocxTemplate is built per row, since rendering mutates
the loaded document.
"""

__all__ = [
    "StampError",
    "DocxStamper",
]

logger = logging.getLogger(__name__)


class StampError(Exception):
    """Raised when a template cannot be rendered for a row."""


class DocxStamper:
    """Thin wrapper around docxtpl.

    strict_placeholders=True makes an unresolved placeholder a StampError;
    otherwise it renders as an empty string.
    """

    def __init__(self, *, strict_placeholders: bool = False) -> None:
        self.strict_placeholders = strict_placeholders

    def _jinja_env(self) -> Environment | None:
        if not self.strict_placeholders:
            return None
        return Environment(undefined=StrictUndefined)

    def stamp(self, template_bytes: bytes, row: Row) -> bytes:
        try:
            template = DocxTemplate(io.BytesIO(template_bytes))
            # autoescape: "&" や "<" を含むセル値でも XML を壊さない
            template.render(row.as_context(), jinja_env=self._jinja_env(), autoescape=True)
            out = io.BytesIO()
            template.save(out)
        except Exception as e:
            # docxtpl は jinja2 / lxml / zipfile 由来の例外をそのまま送出する
            raise StampError(f"row {row.row_number}: {type(e).__name__}: {e}") from e
        logger.debug("stamped row %d (%d bytes)", row.row_number, out.tell())
        return out.getvalue()
