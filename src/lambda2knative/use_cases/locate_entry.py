"""Use Case: find the start call in the entry function and extract the handler reference."""

import logging

from lambda2knative.domain.config import MigrationConfig
from lambda2knative.domain.entities import HandlerReference
from lambda2knative.domain.errors import (
    AmbiguousStartCall,
    EntryNotFound,
    StartCallNotFound,
    UnsupportedHandlerExpression,
)
from lambda2knative.domain.go_ast import CallExpr, GoFile, Ident, Node, selector_parts, walk

logger = logging.getLogger(__name__)


class EntryPointLocator:
    """Scans the entry function for ``lambda.Start(handler)``."""

    def __init__(self, config: MigrationConfig) -> None:
        self.config = config

    @property
    def start_call(self) -> str:
        return f"{self.config.start_package}.{self.config.start_method}"

    def locate(self, file: GoFile) -> HandlerReference:
        """Return the handler passed to the single start call of the entry function."""
        entry_name = self.config.entry_function
        found = file.find_function(entry_name)
        if found is None:
            raise EntryNotFound(f"{entry_name} function not found", symbol=entry_name)
        _, entry = found
        if entry.body is None:
            raise StartCallNotFound(
                f"{entry_name} function has no body", symbol=entry_name)

        calls = [node for node in walk(entry.body) if self._is_start_call(node)]
        if not calls:
            raise StartCallNotFound(
                f"{self.start_call}() call not found in {entry_name} function", symbol=entry_name)
        if len(calls) > 1:
            raise AmbiguousStartCall(
                f"{len(calls)} {self.start_call}() calls found in {entry_name} function, expected one",
                symbol=entry_name,
            )

        handler = self._handler_reference(calls[0])
        logger.debug("start call in %s passes %s", entry_name, handler.qualified_name)
        return handler

    def _is_start_call(self, node: Node) -> bool:
        if not isinstance(node, CallExpr):
            return False
        return selector_parts(node.fun) == (self.config.start_package, self.config.start_method)

    def _handler_reference(self, call: CallExpr) -> HandlerReference:
        if not call.args:
            raise UnsupportedHandlerExpression(f"{self.start_call}() called without a handler")
        arg = call.args[0]
        if isinstance(arg, Ident):
            return HandlerReference.local(arg.name)
        parts = selector_parts(arg)
        if parts is not None:
            package, name = parts
            return HandlerReference.imported(package, name)
        text = getattr(arg, "text", type(arg).__name__)
        raise UnsupportedHandlerExpression(
            f"unsupported handler expression passed to {self.start_call}(): {text}")
