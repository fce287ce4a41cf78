"""Merging of operations built by different discovery passes."""

from api_doc_builder.models.openapi import MediaType, OpenApiModel, Operation, Parameter

_FILLED_FIELDS = ("summary", "description", "external_docs", "deprecated", "security", "servers", "callbacks")


def merge_operations(existing: Operation | None, incoming: Operation | None) -> Operation:
    """Reconcile an already registered operation with a newly declared one.

    ============  ============  ======================================
    existing      incoming      result
    ============  ============  ======================================
    present       present       ``existing`` enriched from ``incoming``
    present       absent        ``existing``
    absent        present       ``incoming``
    absent        absent        a new empty operation
    ============  ============  ======================================
    """
    if existing is not None and incoming is not None:
        return _merge(existing, incoming)
    if existing is not None:
        return existing
    if incoming is not None:
        return incoming
    return Operation()


def _merge(operation: Operation, model: Operation) -> Operation:
    if len(operation.operation_id or "") < len(model.operation_id or ""):
        operation.operation_id = model.operation_id

    for code, response in (model.responses or {}).items():
        if operation.responses is None:
            operation.responses = {}
        existing = operation.responses.get(code)
        if existing is None:
            operation.responses[code] = response
        elif response.content:
            if existing.content:
                merge_content(existing.content, response.content)
            else:
                existing.content = response.content

    if model.request_body is not None:
        if operation.request_body is None:
            operation.request_body = model.request_body
        elif model.request_body.content:
            if operation.request_body.content:
                merge_content(operation.request_body.content, model.request_body.content)
            else:
                operation.request_body.content = model.request_body.content

    for parameter in model.parameters or []:
        if not any(_same_parameter(p, parameter) for p in operation.parameters or []):
            operation.add_parameter(parameter)

    for tag in model.tags or []:
        operation.add_tag(tag)

    for name in _FILLED_FIELDS:
        if getattr(operation, name) is None and getattr(model, name) is not None:
            setattr(operation, name, getattr(model, name))
    return operation


def merge_content(existing: dict[str, MediaType], incoming: dict[str, MediaType]) -> None:
    """Add ``incoming`` media types; differing schemas for one media type become ``oneOf``."""
    for media_type, value in incoming.items():
        current = existing.get(media_type)
        if current is None:
            existing[media_type] = value
            continue
        if value.schema_ is None or value.schema_ == current.schema_:
            continue
        if current.schema_ is None:
            current.schema_ = value.schema_
        elif "oneOf" in current.schema_:
            if value.schema_ not in current.schema_["oneOf"]:
                current.schema_["oneOf"].append(value.schema_)
        else:
            current.schema_ = {"oneOf": [current.schema_, value.schema_]}


def merge_parameter(parameters: list[Parameter], parameter: Parameter) -> None:
    """Merge ``parameter`` into the list by name and location.

    A documented parameter keeps its own values; missing ones are filled from
    the computed parameter. Unknown parameters are appended.
    """
    for existing in parameters:
        if parameter.name is not None and _same_parameter(existing, parameter):
            fill_unset(existing, parameter)
            return
    parameters.append(parameter)


def fill_unset(target: OpenApiModel, source: OpenApiModel) -> None:
    for name in type(target).model_fields:
        if getattr(target, name) is None and getattr(source, name, None) is not None:
            setattr(target, name, getattr(source, name))


def _same_parameter(a: Parameter, b: Parameter) -> bool:
    return a.name == b.name and a.in_ == b.in_
