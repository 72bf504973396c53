"""Document URIs, including the virtual documents that describe tables and jobs."""

from __future__ import annotations

from dataclasses import dataclass

FILE_SCHEME = "file://"
VIRTUAL_SCHEME = "bqls://"

_SEGMENT_PREFIXES = ("project/", "dataset/", "table/", "job/")


@dataclass(frozen=True)
class VirtualTextDocumentInfo:
    """The resource a virtual text document refers to."""

    project_id: str = ""
    dataset_id: str = ""
    table_id: str = ""
    job_id: str = ""

    def validate(self) -> None:
        """Raise ValueError unless the info names a table or a job in a project."""
        if not self.project_id:
            raise ValueError("project ID is required")
        if self.dataset_id and self.table_id:
            return
        if self.job_id:
            return
        raise ValueError("either dataset ID and table ID or job ID is required")


class DocumentURI(str):
    """A URI identifying a document known to the language server."""

    __slots__ = ()

    def is_file(self) -> bool:
        return self.startswith(FILE_SCHEME)

    def file_path(self) -> str:
        """Return the local path of a file URI."""
        if not self.is_file():
            raise ValueError("invalid file URI")
        return self[len(FILE_SCHEME):]

    def is_virtual_text_document(self) -> bool:
        return self.startswith(VIRTUAL_SCHEME)

    def virtual_text_document_info(self) -> VirtualTextDocumentInfo:
        """Parse a virtual document URI into the table or job it refers to."""
        if not self.is_virtual_text_document():
            raise ValueError("invalid text document URI")

        values: dict[str, str] = {}
        rest = self[len(VIRTUAL_SCHEME):]
        while rest:
            prefix = next((p for p in _SEGMENT_PREFIXES if rest.startswith(p)), None)
            if prefix is None:
                raise ValueError(f"invalid text document URI segment: {rest!r}")
            value, _, rest = rest[len(prefix):].partition("/")
            values[prefix.rstrip("/")] = value

        info = VirtualTextDocumentInfo(
            project_id=values.get("project", ""),
            dataset_id=values.get("dataset", ""),
            table_id=values.get("table", ""),
            job_id=values.get("job", ""),
        )
        info.validate()
        return info


def new_job_virtual_text_document_uri(project_id: str, job_id: str) -> DocumentURI:
    """Build the virtual document URI of a query job."""
    return DocumentURI(f"{VIRTUAL_SCHEME}project/{project_id}/job/{job_id}")


def new_table_virtual_text_document_uri(
    project_id: str, dataset_id: str, table_id: str
) -> DocumentURI:
    """Build the virtual document URI of a table."""
    return DocumentURI(
        f"{VIRTUAL_SCHEME}project/{project_id}/dataset/{dataset_id}/table/{table_id}"
    )