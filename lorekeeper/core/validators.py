#!/usr/bin/env python3
"""
validators.py
--------------------
Normalization and validation helpers for incoming metadata.

Managers and the CLI pass raw dictionaries (parsed JSON, click options)
through these helpers before anything reaches the database.
"""
from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from .exceptions import ValidationError


class DataValidator:
    """Centralized data validation for metadata dictionaries."""

    @staticmethod
    def validate_required_fields(
        data: Dict[str, Any], required_fields: List[str]
    ) -> None:
        """
        Validate that required fields are present and non-empty.

        Args:
            data: Data dictionary to validate
            required_fields: List of required field names

        Raises:
            ValidationError: If a field is missing or empty
        """
        for field in required_fields:
            if field not in data or data[field] in (None, "", [], {}):
                raise ValidationError(f"Required field '{field}' missing or empty")

    @staticmethod
    def normalize_string(value: Any) -> Optional[str]:
        """
        Strip and collapse internal whitespace.

        Returns:
            Normalized string, or None for empty input
        """
        if value is None:
            return None
        text = re.sub(r"\s+", " ", str(value)).strip()
        return text or None

    @staticmethod
    def normalize_int(value: Any) -> Optional[int]:
        """
        Convert value to integer.

        Args:
            value: int, integral float or numeric string

        Returns:
            Integer value or None for None/empty string

        Raises:
            ValidationError: If the value is not an integer
        """
        if value is None or value == "":
            return None
        if isinstance(value, bool):
            raise ValidationError(f"Expected an integer, got boolean {value!r}")
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                pass
        raise ValidationError(f"Expected an integer, got {value!r}")

    @staticmethod
    def normalize_bool(value: Any) -> Optional[bool]:
        """
        Convert various inputs to boolean.

        Raises:
            ValidationError: If conversion fails
        """
        if value is None:
            return None
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)) and value in (0, 1):
            return bool(value)
        if isinstance(value, str):
            if value.lower() in ("true", "1", "yes", "on"):
                return True
            if value.lower() in ("false", "0", "no", "off"):
                return False
        raise ValidationError(f"Cannot convert {value!r} to boolean")

    @staticmethod
    def normalize_string_list(value: Any) -> List[str]:
        """
        Normalize a string or list of strings into a clean list.

        Empty items are dropped and duplicates removed, keeping order.
        """
        if value is None:
            return []
        items = [value] if isinstance(value, str) else list(value)
        result: List[str] = []
        for item in items:
            normalized = DataValidator.normalize_string(item)
            if normalized and normalized not in result:
                result.append(normalized)
        return result
