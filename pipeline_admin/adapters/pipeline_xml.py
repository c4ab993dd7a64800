"""XML document codec for the pipeline web service.

Parsing helpers match elements by local name so documents are accepted with
or without the service namespace. Builders emit unprefixed elements carrying
the service namespace as default namespace.
"""

from __future__ import annotations

from typing import Callable, Final
import xml.etree.ElementTree as element_tree

from pipeline_admin.domain import (
    AnyUriType,
    BooleanType,
    ChoiceType,
    DataType,
    DirUriType,
    FileUriType,
    IntegerType,
    Job,
    JobMessage,
    JobRequest,
    JobSize,
    JobSizes,
    PatternType,
    ScriptArgumentDeclaration,
    ScriptDescriptor,
    ServiceClient,
    ServiceProperty,
    StringType,
    ValueType,
)

from .pipeline_errors import PipelineResponseError

PIPELINE_XML_NAMESPACE: Final[str] = "http://www.daisy.org/ns/pipeline/data"

_BUILTIN_DATA_TYPES: Final[dict[str, Callable[[], DataType]]] = {
    "boolean": BooleanType,
    "integer": IntegerType,
    "int": IntegerType,
    "nonNegativeInteger": IntegerType,
    "anyURI": AnyUriType,
    "anyFileURI": FileUriType,
    "anyDirURI": DirUriType,
    "string": StringType,
}


def adapter_xml_parse_document(payload: bytes, context_label: str) -> element_tree.Element:
    """Parse payload as XML and raise deterministic parsing errors.

    Args:
        payload: Candidate XML payload.
        context_label: Context label for error messages.

    Returns:
        xml.etree.ElementTree.Element: Parsed root node.

    Raises:
        PipelineResponseError: Raised when payload is not valid XML.
    """

    try:
        return element_tree.fromstring(payload)
    except element_tree.ParseError as error:
        raise PipelineResponseError(f"Pipeline XML parse failed for context={context_label}") from error


def adapter_xml_parse_error_description(payload: bytes) -> str | None:
    """Extract the human-readable description from a service error document.

    Args:
        payload: Error response body.

    Returns:
        str | None: Description text, or None when the body is not an error document.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    try:
        root = element_tree.fromstring(payload)
    except element_tree.ParseError:
        return None
    if _xml_local_name(root.tag) != "error":
        return None
    description = _xml_child_text(root, "description")
    return description or None


def adapter_xml_parse_alive(root: element_tree.Element) -> bool:
    """Return the `localfs` flag from an alive document.

    Args:
        root: Parsed alive document root.

    Returns:
        bool: True when the service shares the client's file system.

    Raises:
        PipelineResponseError: Raised when root is not an alive document.
    """

    _xml_require_root(root, "alive")
    return root.get("localfs", "false").strip().lower() == "true"


def adapter_xml_parse_script_references(root: element_tree.Element) -> list[tuple[str, str]]:
    """Return `(script_id, href)` pairs from a scripts listing.

    Args:
        root: Parsed scripts document root.

    Returns:
        list[tuple[str, str]]: Script identifiers and resource URLs in document order.

    Raises:
        PipelineResponseError: Raised when root is not a scripts document.
    """

    _xml_require_root(root, "scripts")
    references: list[tuple[str, str]] = []
    for script_element in _xml_children(root, "script"):
        script_id = script_element.get("id", "").strip()
        if not script_id:
            raise PipelineResponseError("Pipeline scripts listing contains a script without id")
        references.append((script_id, script_element.get("href", "").strip()))
    return references


def adapter_xml_parse_script(
    root: element_tree.Element,
    data_type_resolver: Callable[[str], DataType] | None = None,
) -> ScriptDescriptor:
    """Parse one detailed script document into a descriptor.

    Option types naming a built-in type map directly to a data type. Any other
    type name is treated as a data type identifier and passed to
    `data_type_resolver`; without a resolver it falls back to `StringType`.

    Args:
        root: Parsed script document root.
        data_type_resolver: Optional callable loading a named data type.

    Returns:
        ScriptDescriptor: Script interface with ordered inputs and options.

    Raises:
        PipelineResponseError: Raised when root is not a script document.
    """

    _xml_require_root(root, "script")
    script_id = root.get("id", "").strip()
    if not script_id:
        raise PipelineResponseError("Pipeline script document is missing its id")

    inputs = tuple(
        ScriptArgumentDeclaration(
            name=_xml_require_attribute(input_element, "name", context_label=f"script {script_id} input"),
            nicename=input_element.get("nicename", ""),
            short_description=input_element.get("shortDesc", input_element.get("desc", "")),
            long_description=input_element.get("longDesc", input_element.get("desc", "")),
            data_type=FileUriType(),
            sequence=_xml_bool_attribute(input_element, "sequence"),
            required=True,
            media_type=input_element.get("mediaType"),
        )
        for input_element in _xml_children(root, "input")
    )
    options = tuple(
        ScriptArgumentDeclaration(
            name=_xml_require_attribute(option_element, "name", context_label=f"script {script_id} option"),
            nicename=option_element.get("nicename", ""),
            short_description=option_element.get("shortDesc", option_element.get("desc", "")),
            long_description=option_element.get("longDesc", option_element.get("desc", "")),
            data_type=_xml_option_data_type(option_element, data_type_resolver),
            sequence=_xml_bool_attribute(option_element, "sequence"),
            required=_xml_bool_attribute(option_element, "required"),
            media_type=option_element.get("mediaType"),
        )
        for option_element in _xml_children(root, "option")
    )
    homepage = _xml_child_text(root, "homepage")
    return ScriptDescriptor(
        script_id=script_id,
        href=root.get("href", ""),
        nicename=_xml_child_text(root, "nicename"),
        description=_xml_child_text(root, "description"),
        version=_xml_child_text(root, "version"),
        inputs=inputs,
        options=options,
        homepage=homepage or None,
    )


def adapter_xml_builtin_data_type(type_name: str) -> DataType | None:
    """Return the data type for a built-in type name, if it is one.

    Args:
        type_name: Type name with or without an `xs:` prefix.

    Returns:
        DataType | None: Built-in data type, or None for custom type names.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    normalized_name = type_name.strip()
    if normalized_name.startswith("xs:"):
        normalized_name = normalized_name[3:]
    factory = _BUILTIN_DATA_TYPES.get(normalized_name)
    return factory() if factory is not None else None


def adapter_xml_parse_data_type(root: element_tree.Element) -> DataType:
    """Parse a data type definition (`choice`, `value` and `data` elements).

    Args:
        root: Parsed data type document root.

    Returns:
        DataType: Recursively composed data type.

    Raises:
        PipelineResponseError: Raised when the definition uses unsupported elements.
    """

    element_name = _xml_local_name(root.tag)
    if element_name == "choice":
        variants = tuple(
            adapter_xml_parse_data_type(child)
            for child in root
            if _xml_local_name(child.tag) in {"choice", "value", "data"}
        )
        if not variants:
            raise PipelineResponseError("Pipeline data type choice has no variants")
        return ChoiceType(variants=variants)
    if element_name == "value":
        return ValueType(value=root.text or "")
    if element_name == "data":
        pattern = None
        for parameter in _xml_children(root, "param"):
            if parameter.get("name") == "pattern":
                pattern = parameter.text or ""
        if pattern is not None:
            return PatternType(pattern=pattern)
        builtin_type = adapter_xml_builtin_data_type(root.get("type", "string"))
        return builtin_type if builtin_type is not None else StringType()

    definition_children = [child for child in root if _xml_local_name(child.tag) in {"choice", "value", "data"}]
    if len(definition_children) == 1:
        return adapter_xml_parse_data_type(definition_children[0])
    raise PipelineResponseError(f"Pipeline data type element is not supported: {element_name}")


def adapter_xml_parse_job(root: element_tree.Element) -> Job:
    """Parse a job document into a job handle.

    Args:
        root: Parsed job document root.

    Returns:
        Job: Job identifier, status and labels.

    Raises:
        PipelineResponseError: Raised when root is not a job document.
    """

    _xml_require_root(root, "job")
    return Job(
        job_id=_xml_require_attribute(root, "id", context_label="job"),
        status=root.get("status", "").strip().upper(),
        nicename=_xml_child_text(root, "nicename"),
        href=root.get("href", ""),
    )


def adapter_xml_parse_jobs(root: element_tree.Element) -> list[Job]:
    """Parse a jobs listing into job handles."""

    _xml_require_root(root, "jobs")
    return [adapter_xml_parse_job(job_element) for job_element in _xml_children(root, "job")]


def adapter_xml_parse_job_messages(root: element_tree.Element, status: str) -> list[JobMessage]:
    """Return the log messages embedded in a job document, ordered by sequence.

    Nested messages are flattened.

    Args:
        root: Parsed job document root.
        status: Job status to attach to every message.

    Returns:
        list[JobMessage]: Messages in ascending sequence order.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    messages: list[JobMessage] = []
    for message_element in root.iter():
        if _xml_local_name(message_element.tag) != "message":
            continue
        sequence_text = message_element.get("sequence", "").strip()
        text = message_element.get("content")
        if text is None:
            text = (message_element.text or "").strip()
        messages.append(
            JobMessage(
                status=status,
                text=text,
                level=message_element.get("level"),
                sequence=int(sequence_text) if sequence_text.isdigit() else None,
            )
        )
    return sorted(messages, key=lambda message: message.sequence if message.sequence is not None else -1)


def adapter_xml_build_job_request(request: JobRequest, script_href: str) -> bytes:
    """Serialize a job request document.

    Single-valued options are written as element text; multi-valued options
    and every input use `item` children.

    Args:
        request: Populated job request.
        script_href: Script resource URL.

    Returns:
        bytes: UTF-8 encoded XML document with declaration.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    root = element_tree.Element("jobRequest", {"xmlns": PIPELINE_XML_NAMESPACE})
    element_tree.SubElement(root, "script", {"href": script_href})
    if request.nicename:
        element_tree.SubElement(root, "nicename").text = request.nicename
    if request.priority:
        element_tree.SubElement(root, "priority").text = request.priority
    for input_name, uris in request.inputs.items():
        input_element = element_tree.SubElement(root, "input", {"name": input_name})
        for uri in uris:
            element_tree.SubElement(input_element, "item", {"value": uri})
    for option_name, values in request.options.items():
        option_element = element_tree.SubElement(root, "option", {"name": option_name})
        if len(values) == 1:
            option_element.text = values[0]
            continue
        for value in values:
            element_tree.SubElement(option_element, "item", {"value": value})
    return element_tree.tostring(root, encoding="utf-8", xml_declaration=True)


def adapter_xml_parse_client(root: element_tree.Element) -> ServiceClient:
    """Parse one client element."""

    _xml_require_root(root, "client")
    return ServiceClient(
        client_id=_xml_require_attribute(root, "id", context_label="client"),
        secret=root.get("secret", ""),
        role=root.get("role", ""),
        contact=root.get("contact", ""),
    )


def adapter_xml_parse_clients(root: element_tree.Element) -> list[ServiceClient]:
    """Parse a clients listing."""

    _xml_require_root(root, "clients")
    return [adapter_xml_parse_client(client_element) for client_element in _xml_children(root, "client")]


def adapter_xml_build_client(client: ServiceClient) -> bytes:
    """Serialize one client document for create and modify requests."""

    attributes = {
        "xmlns": PIPELINE_XML_NAMESPACE,
        "id": client.client_id,
        "secret": client.secret,
        "role": client.role,
    }
    if client.contact:
        attributes["contact"] = client.contact
    root = element_tree.Element("client", attributes)
    return element_tree.tostring(root, encoding="utf-8", xml_declaration=True)


def adapter_xml_parse_properties(root: element_tree.Element) -> list[ServiceProperty]:
    """Parse a runtime properties listing."""

    _xml_require_root(root, "properties")
    return [
        ServiceProperty(
            name=property_element.get("name", ""),
            value=property_element.get("value", ""),
            bundle_name=property_element.get("bundleName", ""),
        )
        for property_element in _xml_children(root, "property")
    ]


def adapter_xml_parse_sizes(root: element_tree.Element) -> JobSizes:
    """Parse a job sizes document.

    Args:
        root: Parsed sizes document root.

    Returns:
        JobSizes: Per-job sizes and the overall total; the total is summed from
        the entries when the document does not carry one.

    Raises:
        PipelineResponseError: Raised when sizes are not integers.
    """

    _xml_require_root(root, "jobSizes")
    job_sizes = tuple(
        JobSize(
            job_id=_xml_require_attribute(size_element, "id", context_label="jobSize"),
            context=_xml_int_attribute(size_element, "context"),
            output=_xml_int_attribute(size_element, "output"),
            log=_xml_int_attribute(size_element, "log"),
        )
        for size_element in _xml_children(root, "jobSize")
    )
    if root.get("total") is not None:
        total = _xml_int_attribute(root, "total")
    else:
        total = sum(job_size.size_total() for job_size in job_sizes)
    return JobSizes(total=total, job_sizes=job_sizes)


def _xml_local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _xml_children(element: element_tree.Element, name: str) -> list[element_tree.Element]:
    return [child for child in element if _xml_local_name(child.tag) == name]


def _xml_child_text(element: element_tree.Element, name: str) -> str:
    for child in _xml_children(element, name):
        return (child.text or "").strip()
    return ""


def _xml_require_root(root: element_tree.Element, name: str) -> None:
    if _xml_local_name(root.tag) != name:
        raise PipelineResponseError(f"Pipeline document root must be <{name}>, got <{_xml_local_name(root.tag)}>")


def _xml_require_attribute(element: element_tree.Element, name: str, context_label: str) -> str:
    value = element.get(name, "").strip()
    if not value:
        raise PipelineResponseError(f"Pipeline {context_label} element is missing attribute {name}")
    return value


def _xml_bool_attribute(element: element_tree.Element, name: str) -> bool:
    return element.get(name, "false").strip().lower() == "true"


def _xml_int_attribute(element: element_tree.Element, name: str) -> int:
    raw_value = element.get(name, "0").strip() or "0"
    try:
        return int(raw_value)
    except ValueError as error:
        raise PipelineResponseError(f"Pipeline attribute {name} is not an integer: {raw_value}") from error


def _xml_option_data_type(
    option_element: element_tree.Element,
    data_type_resolver: Callable[[str], DataType] | None,
) -> DataType:
    type_name = option_element.get("type", "").strip()
    builtin_type = adapter_xml_builtin_data_type(type_name) if type_name else StringType()
    if builtin_type is not None:
        return builtin_type
    data_type_id = option_element.get("data-type", type_name).strip()
    if data_type_resolver is None:
        return StringType()
    return data_type_resolver(data_type_id)
