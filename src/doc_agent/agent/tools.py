"""Built-in document tools exposed to the agent."""

from __future__ import annotations

from dataclasses import asdict

from pydantic import BaseModel, Field

from doc_agent.agent.registry import ToolOutput, ToolRegistry, ToolSpec
from doc_agent.documents.analysis import (
    DEFAULT_CONTEXT_LENGTH,
    MAX_CONTEXT_LENGTH,
    MIN_CONTEXT_LENGTH,
    AnalyzeType,
    analyze_document,
    search_document,
)
from doc_agent.documents.extractor import (
    ExtractorRegistry,
    PdfExtractionError,
    detect_document_type,
    read_document_text,
)
from doc_agent.documents.store import AnalysisRecord, save_analysis
from doc_agent.workspace import Workspace


class ChangeDirectoryInput(BaseModel):
    path: str = Field(min_length=1, description="The directory path to change to (relative or absolute)")


class ListFilesInput(BaseModel):
    path: str | None = Field(
        default=None,
        description="Optional relative path to list files from. Defaults to current directory if not provided.",
    )


class ReadFileInput(BaseModel):
    path: str = Field(min_length=1, description="The relative path of a file in the working directory.")


class DocumentPathInput(BaseModel):
    file_path: str = Field(min_length=1, description="The path to the document file")


class AnalyzeInput(BaseModel):
    content: str = Field(description="Content to analyze")
    analyze_type: AnalyzeType = AnalyzeType.FULL


class SearchInput(BaseModel):
    content: str = Field(description="Document content to search")
    query: str = Field(min_length=1, description="Search term")
    context_length: int = Field(
        default=DEFAULT_CONTEXT_LENGTH,
        ge=MIN_CONTEXT_LENGTH,
        le=MAX_CONTEXT_LENGTH,
    )


class SaveAnalysisInput(BaseModel):
    analysis_data: AnalysisRecord = Field(description="Analysis data to save")
    output_path: str = Field(min_length=1, description="Where to save the JSON file")


def register_document_tools(
    registry: ToolRegistry,
    workspace: Workspace,
    *,
    extractors: ExtractorRegistry | None = None,
) -> None:
    """Register the document tool set bound to one `workspace`.

    Tools:
    - `change_directory` / `list_files` / `read_file`: workspace navigation.
    - `detect_document_type`: extension label plus size and mtime.
    - `extract_text_content`: readable text for txt, md, json, csv, html, pdf.
    - `analyze_document`: summary, entities and topics heuristics.
    - `search_document`: literal search with surrounding context.
    - `save_analysis`: persist an analysis as JSON.
    """

    extractor_registry = extractors or ExtractorRegistry()

    def _change_directory(input_data: ChangeDirectoryInput) -> ToolOutput:
        try:
            current = workspace.change_directory(input_data.path)
        except OSError as exc:
            return {"success": False, "path": input_data.path, "error": str(exc)}
        return {
            "success": True,
            "path": input_data.path,
            "current_directory": str(current),
            "message": f"Successfully changed to directory: {current}",
        }

    def _list_files(input_data: ListFilesInput) -> ToolOutput:
        if workspace.is_protected(input_data.path):
            return {"error": "Cannot list protected path", "path": input_data.path}
        target = input_data.path.strip() if input_data.path and input_data.path.strip() else "."
        entries = sorted(entry.name for entry in workspace.resolve(target).iterdir())
        return {"path": target, "output": entries}

    def _read_file(input_data: ReadFileInput) -> ToolOutput:
        resolved = workspace.resolve(input_data.path)
        if resolved.is_dir():
            return {
                "path": input_data.path,
                "error": f"Path is a directory, not a file: {input_data.path}",
            }
        return {"path": input_data.path, "output": read_document_text(resolved)}

    def _detect_type(input_data: DocumentPathInput) -> ToolOutput:
        if workspace.is_protected(input_data.file_path):
            return {"error": "Cannot analyze protected path", "file_path": input_data.file_path}
        info = detect_document_type(
            workspace.resolve(input_data.file_path),
            display_path=input_data.file_path,
        )
        return asdict(info)

    def _extract_text(input_data: DocumentPathInput) -> ToolOutput:
        if workspace.is_protected(input_data.file_path):
            return {"error": "Cannot read protected path", "file_path": input_data.file_path}
        try:
            extracted = extractor_registry.extract_path(
                workspace.resolve(input_data.file_path),
                display_path=input_data.file_path,
            )
        except PdfExtractionError as exc:
            return {"error": f"PDF parse error: {exc}", "file_path": input_data.file_path}
        return asdict(extracted)

    def _analyze(input_data: AnalyzeInput) -> ToolOutput:
        return {"analysis_data": analyze_document(input_data.content, input_data.analyze_type)}

    def _search(input_data: SearchInput) -> ToolOutput:
        matches = search_document(input_data.content, input_data.query, input_data.context_length)
        return {
            "query": input_data.query,
            "matches": [asdict(match) for match in matches],
            "total_matches": len(matches),
        }

    def _save(input_data: SaveAnalysisInput) -> ToolOutput:
        saved = save_analysis(input_data.analysis_data, workspace.resolve(input_data.output_path))
        return {"success": True, "saved_path": str(saved)}

    registry.register(
        ToolSpec(
            name="change_directory",
            description="Change the current working directory to navigate to different folders.",
            args_schema=ChangeDirectoryInput,
            handler=_change_directory,
            error_context=["path"],
            tags=["filesystem"],
        )
    )
    registry.register(
        ToolSpec(
            name="list_files",
            description=(
                "List files and directories at a given path. "
                "If no path is provided, lists files in the current directory."
            ),
            args_schema=ListFilesInput,
            handler=_list_files,
            error_context=["path"],
            tags=["filesystem"],
        )
    )
    registry.register(
        ToolSpec(
            name="read_file",
            description=(
                "Read the contents of a given relative file path. Use this when you want "
                "to see what's inside a file. Do not use this with directory names."
            ),
            args_schema=ReadFileInput,
            handler=_read_file,
            error_context=["path"],
            tags=["filesystem"],
        )
    )
    registry.register(
        ToolSpec(
            name="detect_document_type",
            description="Detect the type of a document based on its extension and content.",
            args_schema=DocumentPathInput,
            handler=_detect_type,
            error_context=["file_path"],
            tags=["document"],
        )
    )
    registry.register(
        ToolSpec(
            name="extract_text_content",
            description="Extract readable text content from supported formats: txt, md, json, csv, html, pdf.",
            args_schema=DocumentPathInput,
            handler=_extract_text,
            error_context=["file_path"],
            tags=["document"],
        )
    )
    registry.register(
        ToolSpec(
            name="analyze_document",
            description="Analyze document content: summary, entities, topics.",
            args_schema=AnalyzeInput,
            handler=_analyze,
            tags=["nlp"],
        )
    )
    registry.register(
        ToolSpec(
            name="search_document",
            description="Search for terms within document content.",
            args_schema=SearchInput,
            handler=_search,
            tags=["nlp"],
        )
    )
    registry.register(
        ToolSpec(
            name="save_analysis",
            description="Save analysis output to a structured JSON file.",
            args_schema=SaveAnalysisInput,
            handler=_save,
            tags=["document", "persistence"],
        )
    )
