"""
Local fallback copy of the layout
"""

import json
import logging
import os
from typing import List, Optional

from seatplan.editor.document import dump_layout, parse_layout
from seatplan.editor.errors import InvalidLayoutDocument
from seatplan.editor.layout import Table

logger = logging.getLogger(__name__)


class LayoutCache:
    """Mirrors the in-memory layout to a JSON file after every edit.

    An empty layout is written as ``[]`` so deleting the last table is
    remembered too.
    """

    def __init__(self, path: Optional[str]):
        self.path = path

    def write(self, tables: List[Table]) -> None:
        if not self.path:
            return
        tmp_path = f"{self.path}.tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(dump_layout(tables))
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"Could not write layout cache {self.path}: {e}")

    def read(self) -> Optional[List[Table]]:
        """Cached tables, ``[]`` for a cached empty layout, None when there is no usable cache"""
        if not self.path or not os.path.exists(self.path):
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = f.read()
            if json.loads(raw) == []:
                return []
            return parse_layout(raw)
        except (OSError, ValueError, InvalidLayoutDocument) as e:
            logger.error(f"Could not read layout cache {self.path}: {e}")
            return None
