"""
Query result shaping
Turns parsed Flux tables into JSON friendly structures
"""
from datetime import datetime
from typing import Any, Dict, Iterable, List


def _jsonable(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    return value


def record_to_dict(record) -> Dict[str, Any]:
    """All column values of a Flux record, keyed by column label"""
    return {key: _jsonable(value) for key, value in record.values.items()}


def table_metadata(table) -> List[Dict[str, Any]]:
    """Column descriptors of a Flux table"""
    return [
        {"label": column.label, "datatype": column.data_type, "group": bool(column.group)}
        for column in table.columns
    ]


def tables_to_response(tables: Iterable, with_metadata: bool = False) -> Dict[str, List[Dict[str, Any]]]:
    """
    Gather every record of every table, one response entry per table, in the
    order InfluxDB returned them.
    """
    response = []
    for table in tables:
        entry = {}
        if with_metadata:
            entry["metadata"] = table_metadata(table)
        entry["records"] = [record_to_dict(record) for record in table.records]
        response.append(entry)
    return {"tables": response}


def graph_series(tables: Iterable) -> List[Dict[str, List]]:
    """
    Plotly.js trace for the first table: x is the record index, y the _value.

    Stops at the first record without a numeric _value.
    """
    trace = {"x": [], "y": []}
    for table in tables:
        for index, record in enumerate(table.records):
            value = record.values.get("_value")
            if isinstance(value, bool) or value is None:
                break
            try:
                value = float(value)
            except (TypeError, ValueError):
                break
            trace["x"].append(index)
            trace["y"].append(value)
        # Only the first table is graphed
        break
    return [trace]
