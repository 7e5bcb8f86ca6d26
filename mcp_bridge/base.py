"""Base abstractions for bridge tools."""

from __future__ import annotations

import inspect
import json
import re
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional, Type, get_type_hints

import jsonschema
from pydantic import BaseModel, ValidationError, create_model

from .errors import ToolExecutionError
from .protocol import ToolDescriptor


class BaseTool(ABC):
    """
    Abstract capability exposed to the remote peer.

    Subclasses declare ``name`` and ``description`` and describe their
    arguments with either a Pydantic ``input_model`` or a raw JSON
    ``schema``, then implement ``_execute``.
    """

    name: str
    description: str = ""
    input_model: Optional[Type[BaseModel]] = None
    schema: Optional[Dict[str, Any]] = None

    def input_schema(self) -> Dict[str, Any]:
        if self.input_model is not None:
            return self.input_model.model_json_schema()
        if self.schema is not None:
            return dict(self.schema)
        return {"type": "object", "properties": {}}

    def describe(self) -> ToolDescriptor:
        """Return the descriptor advertised by ``tools/list``."""
        return ToolDescriptor(
            name=self.name,
            description=self.description,
            input_schema=self.input_schema(),
        )

    def call(self, arguments: str) -> Any:
        """Parse the JSON argument string and run the tool."""
        payload = self.parse_arguments(arguments)
        return self._execute(payload)

    def parse_arguments(self, arguments: str) -> Any:
        raw = arguments or "{}"
        if self.input_model is not None:
            try:
                return self.input_model.model_validate_json(raw)
            except ValidationError as exc:
                raise ToolExecutionError(
                    f"Invalid arguments for {self.name}: {_summarize(exc)}"
                ) from exc

        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ToolExecutionError(f"Invalid arguments for {self.name}: {exc.msg}") from exc

        if self.schema is not None:
            try:
                jsonschema.validate(payload, self.schema)
            except jsonschema.ValidationError as exc:
                raise ToolExecutionError(
                    f"Invalid arguments for {self.name}: {exc.message}"
                ) from exc
        return payload

    @abstractmethod
    def _execute(self, payload: Any) -> Any:
        """Execute tool logic; the return value must be stringifiable."""


class FunctionTool(BaseTool):
    """Tool backed by a plain function; arguments mirror its signature."""

    def __init__(
        self,
        func: Callable[..., Any],
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> None:
        self.func = func
        self.name = name or func.__name__
        self.description = description if description is not None else (inspect.getdoc(func) or "")
        self.input_model = _model_from_signature(func, _model_name(self.name))

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.func(*args, **kwargs)

    def _execute(self, payload: BaseModel) -> Any:
        return self.func(**dict(payload))

    def __repr__(self) -> str:
        return f"FunctionTool(name={self.name!r})"


def tool(
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> Callable[[Callable[..., Any]], FunctionTool]:
    """Decorator turning a function into a registrable ``FunctionTool``."""

    def decorator(func: Callable[..., Any]) -> FunctionTool:
        return FunctionTool(func, name=name, description=description)

    return decorator


def _model_from_signature(func: Callable[..., Any], model_name: str) -> Type[BaseModel]:
    hints = get_type_hints(func, include_extras=True)
    fields: Dict[str, Any] = {}
    for param in inspect.signature(func).parameters.values():
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        annotation = hints.get(param.name, Any)
        default = ... if param.default is inspect.Parameter.empty else param.default
        fields[param.name] = (annotation, default)
    return create_model(model_name, **fields)


def _model_name(tool_name: str) -> str:
    parts = re.split(r"\W+|_", tool_name)
    return "".join(part[:1].upper() + part[1:] for part in parts if part) + "Input"


def _summarize(exc: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(loc) for loc in error['loc']) or 'arguments'}: {error['msg']}"
        for error in exc.errors()
    )
