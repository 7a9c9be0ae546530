"""
JSON layout document (export, import and the local cache file)
"""

import json
from typing import List, Union

from pydantic import ValidationError

from seatplan.editor.errors import InvalidLayoutDocument
from seatplan.editor.layout import Table
from seatplan.schemas.layout import TableDocument, document_to_table, table_to_document


def dump_layout(tables: List[Table]) -> str:
    documents = [table_to_document(table).dict(by_alias=True) for table in tables]
    return json.dumps(documents, indent=2)


def parse_layout(raw: Union[str, bytes]) -> List[Table]:
    """Parse an exported layout; raises InvalidLayoutDocument on bad input"""
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise InvalidLayoutDocument(str(e)) from e

    if isinstance(data, dict) and "tables" in data:
        data = data["tables"]
    if not isinstance(data, list) or not data:
        raise InvalidLayoutDocument("expected a non-empty list of tables")

    try:
        documents = [TableDocument(**item) for item in data]
    except (TypeError, ValidationError) as e:
        raise InvalidLayoutDocument(str(e)) from e

    numbers = [document.number for document in documents]
    if len(set(numbers)) != len(numbers):
        raise InvalidLayoutDocument("duplicate table numbers")

    tables = [document_to_table(document) for document in documents]

    # ids must stay unique; regenerate the ones that clash
    taken = {table.id for table in tables}
    seen = set()
    for table in tables:
        if table.id in seen:
            table.id = unused_table_id(table.number, taken)
            taken.add(table.id)
        seen.add(table.id)
    return tables


def unused_table_id(number: int, taken) -> str:
    candidate = f"table-{number}"
    suffix = 2
    while candidate in taken:
        candidate = f"table-{number}-{suffix}"
        suffix += 1
    return candidate
