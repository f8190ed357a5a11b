"""Frame updates, modeled as replacement of the frame or of one record."""

from __future__ import annotations

from ..models import DataFrame, RecordError


def replace_record(frame: DataFrame, single: DataFrame) -> DataFrame:
    """Return a new frame with the records of `single` replacing (or added to) `frame`.

    Fields `single` introduces are appended to the schema; existing fields keep
    their definitions.
    """
    known = {f.name for f in frame.fields}
    fields = list(frame.fields) + [f for f in single.fields if f.name not in known]

    incoming = {r.id: r for r in single.records}
    records = []
    for record in frame.records:
        records.append(incoming.pop(record.id, record))
    records.extend(r for r in single.records if r.id in incoming)

    touched = {r.id for r in single.records} | {e.path for e in single.errors}
    errors = [e for e in frame.errors if e.path not in touched]
    errors.extend(single.errors)

    return DataFrame(fields=tuple(fields), records=tuple(records), errors=tuple(errors))


def remove_record(frame: DataFrame, record_id: str) -> DataFrame:
    """Return a new frame without the given record (or its error marker)."""
    return DataFrame(
        fields=frame.fields,
        records=tuple(r for r in frame.records if r.id != record_id),
        errors=tuple(e for e in frame.errors if e.path != record_id),
    )


def with_error(frame: DataFrame, error: RecordError) -> DataFrame:
    """Return a new frame where a record is replaced by an error marker."""
    stripped = remove_record(frame, error.path)
    return DataFrame(
        fields=stripped.fields,
        records=stripped.records,
        errors=stripped.errors + (error,),
    )
