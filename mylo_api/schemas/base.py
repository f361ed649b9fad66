# -*- coding: utf-8 -*-
"""
Conversion of pydantic validation failures into API validation errors.
"""
from typing import Any, Type, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from mylo_api.errors import ValidationError

ModelT = TypeVar('ModelT', bound=BaseModel)


def _error_message(error: dict) -> str:
    if error.get('type') == 'value_error':
        return str(error['ctx']['error'])
    location = '.'.join(str(part) for part in error.get('loc', ()))
    return f"{location}: {error.get('msg')}" if location else error.get('msg', 'invalid input')


def parse_body(model: Type[ModelT], data: Any) -> ModelT:
    """Validate ``data`` against ``model``, raising ValidationError on failure."""
    if not isinstance(data, dict):
        raise ValidationError('Unable to parse request body')
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        errors = e.errors(include_url=False)
        details = [
            {'field': '.'.join(str(part) for part in err.get('loc', ())),
             'message': _error_message(err)}
            for err in errors
        ]
        raise ValidationError(_error_message(errors[0]), details=details) from e
