"""JSON document I/O and timestamp helpers."""

import json
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

from pydantic import BaseModel, ValidationError

T = TypeVar('T', bound=BaseModel)
logger = logging.getLogger('fantasy_cricket.utils')


def load_json(
    path: Path | str,
    schema: type[T] | None = None,
    default: Optional[Callable[[], Any]] = None,
) -> Any | T:
    """
    Read a JSON document, validating it when a schema is given.

    Args:
        path: Document path
        schema: Pydantic model the document must satisfy
        default: Called to produce the result when the file does not exist
            (without it a missing file raises)

    Raises:
        FileNotFoundError: Missing file and no default
        json.JSONDecodeError: Malformed JSON
        ValueError: Document does not match the schema

    Example:
        from fantasy_cricket.schemas import TeamsFile
        teams = load_json('data/teams.json', schema=TeamsFile, default=TeamsFile)
    """
    path = Path(path)

    if not path.exists():
        if default is not None:
            logger.debug(f'{path} does not exist yet, using default')
            return default()
        logger.error(f'File not found: {path}')
        raise FileNotFoundError(f'File not found: {path}')

    try:
        with open(path, encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        logger.error(f'Invalid JSON in {path}: {e.msg} at position {e.pos}')
        raise

    if schema is None:
        return data

    try:
        return schema.model_validate(data)
    except ValidationError as e:
        logger.error(f'{path} failed {schema.__name__} validation: {e.error_count()} error(s)')
        raise ValueError(f'Schema validation failed for {path}:\n{e}') from e


def save_json(path: Path | str, data: Any, indent: int = 2) -> None:
    """
    Write a JSON document (pydantic models are dumped first).

    The document is written beside the target and renamed over it; readers
    see either the old document or the new one.

    Raises:
        TypeError: Data is not JSON-serializable
        OSError: File cannot be written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if isinstance(data, BaseModel):
        data = data.model_dump()

    tmp_path = path.with_name(f'.{path.name}.tmp')
    try:
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=indent, ensure_ascii=False)
        os.replace(tmp_path, path)
    except TypeError as e:
        tmp_path.unlink(missing_ok=True)
        logger.error(f'Cannot serialize data for {path}: {e}')
        raise
    except OSError as e:
        logger.error(f'Failed to write {path}: {e}')
        raise

    logger.debug(f'Saved {path}')


def format_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


def parse_timestamp(value: str | None) -> datetime | None:
    """Inverse of format_timestamp."""
    if not value:
        return None
    return datetime.fromisoformat(value)
