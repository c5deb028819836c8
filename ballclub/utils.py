"""Utility functions for JSON file I/O and id generation."""

import json
import logging
import os
import secrets
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

T = TypeVar('T', bound=BaseModel)
logger = logging.getLogger('ballclub.utils')


def load_json(
    path: Path | str,
    schema: type[T] | None = None,
) -> Any | T:
    """
    Load a JSON data file, optionally validating it against a schema.

    Args:
        path: Path to JSON file (str or Path object)
        schema: Optional Pydantic model to validate against

    Returns:
        Parsed JSON (validated model instance if schema provided)

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If JSON is malformed
        ValueError: If schema validation fails

    Example:
        from ballclub.schemas import GamesFile
        games = load_json('data/games.json', schema=GamesFile)
    """
    path = Path(path)
    logger.debug(f'Loading JSON from: {path}')

    if not path.exists():
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
        logger.error(f'Schema validation failed for {path}: {e}')
        raise ValueError(f'Schema validation failed for {path}:\n{e}') from e


def save_json(
    path: Path | str,
    data: Any,
    indent: int = 2,
) -> None:
    """
    Save data as a JSON file.

    The file is written next to its destination and moved into place, so a
    reader never sees a half-written collection.

    Args:
        path: Path to write to
        data: JSON-serializable data or a Pydantic model
        indent: Indentation level (default: 2 spaces)

    Raises:
        TypeError: If data is not JSON-serializable
        OSError: If file cannot be written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    json_data = data.model_dump() if isinstance(data, BaseModel) else data
    tmp_path = path.with_suffix(path.suffix + '.tmp')

    try:
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(json_data, f, indent=indent, ensure_ascii=False)
        os.replace(tmp_path, path)
        logger.debug(f'Saved JSON to: {path}')
    except TypeError as e:
        tmp_path.unlink(missing_ok=True)
        raise TypeError(f'Data is not JSON-serializable: {e}') from e


def new_id() -> str:
    """Time-based id with a random suffix, unique across a bulk import."""
    return f'{int(time.time() * 1000)}{secrets.token_hex(5)}'


def utc_now_iso() -> str:
    """Current UTC time in ISO 8601."""
    return datetime.now(timezone.utc).isoformat()
