from jinja2 import Environment, PackageLoader, select_autoescape

from entpb import log
from entpb.descriptors.models import FileDescriptor

_env = Environment(
    loader=PackageLoader("entpb.exporters", "templates"),
    autoescape=select_autoescape(),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
)


def render_proto(file_descriptor: FileDescriptor) -> str:
    """
    Render a file descriptor as .proto source.

    Args:
        file_descriptor: The file to render

    Returns:
        str: The .proto representation of the file
    """
    log.debug(f"Rendering {file_descriptor.name} with {len(file_descriptor.messages)} messages")

    template = _env.get_template("proto_file.j2")
    return template.render(
        syntax=file_descriptor.syntax,
        package=file_descriptor.package,
        dependencies=file_descriptor.dependencies,
        messages=file_descriptor.messages,
        services=file_descriptor.services,
    )
