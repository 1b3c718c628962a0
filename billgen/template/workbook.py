"""Workbook loading and validation utilities.

This module provides safe loading of Excel templates with proper error
handling for empty, oversized, invalid, corrupt or unsupported files, and a
wall-clock bound on the load step.
"""

import io
import zipfile
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import TYPE_CHECKING, Any

import openpyxl
from openpyxl import Workbook
from openpyxl.utils.exceptions import InvalidFileException

if TYPE_CHECKING:
    from openpyxl.worksheet.worksheet import Worksheet


class WorkbookLoadError(Exception):
    """Exception raised when a template workbook cannot be used.

    This exception is raised for various loading failures including:
    - Empty or oversized file data
    - Corrupt or invalid ZIP structure
    - Invalid Excel file format
    - Password-protected files
    - Load step exceeding its time limit

    Attributes:
        message: Human-readable error description
        detail: Additional technical details (optional)
    """

    def __init__(self, message: str, detail: str | None = None):
        self.message = message
        self.detail = detail
        super().__init__(message)

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message


class NoWorksheetError(WorkbookLoadError):
    """The workbook contains no worksheet to populate."""

    def __init__(self, detail: str | None = None):
        super().__init__(
            message="No worksheet found",
            detail=detail or "The template must contain at least one worksheet",
        )


def check_template_size(file_bytes: bytes, max_bytes: int | None = None) -> None:
    """Reject empty, truncated or oversized uploads before parsing.

    Raises:
        WorkbookLoadError: If the size is outside the accepted range
    """
    if not file_bytes:
        raise WorkbookLoadError(
            message="Empty file",
            detail="The uploaded file is empty. Please select a valid Excel file.",
        )

    # A valid xlsx file should be at least ~100 bytes (empty workbook)
    if len(file_bytes) < 100:
        raise WorkbookLoadError(
            message="Invalid file",
            detail=f"File too small ({len(file_bytes)} bytes) to be a valid Excel workbook",
        )

    if max_bytes is not None and len(file_bytes) > max_bytes:
        limit_mb = max_bytes / (1024 * 1024)
        raise WorkbookLoadError(
            message="File too large",
            detail=f"File is {len(file_bytes)} bytes. Please use a file smaller than {limit_mb:g}MB.",
        )


def load_workbook_safe(file_bytes: bytes, max_bytes: int | None = None) -> Workbook:
    """Safely load an Excel workbook from raw bytes.

    The bytes are never modified, so the same template buffer can be loaded
    once per generated bill.

    Args:
        file_bytes: Raw bytes of the Excel file
        max_bytes: Optional upper bound on the file size

    Returns:
        Workbook: Loaded openpyxl Workbook object

    Raises:
        WorkbookLoadError: If the file cannot be loaded due to:
            - Empty, truncated or oversized file data
            - Corrupt or invalid ZIP structure (xlsx files are ZIP archives)
            - Invalid Excel file format
            - Password-protected files
            - Other unexpected errors
    """
    check_template_size(file_bytes, max_bytes)

    file_stream = io.BytesIO(file_bytes)

    try:
        # data_only=False keeps formulas; read_only=False is required to
        # write cells and keep merged ranges, dimensions and sheet settings.
        workbook = openpyxl.load_workbook(
            file_stream,
            data_only=False,
            read_only=False,
            keep_links=True,
        )
        return workbook

    except zipfile.BadZipFile as e:
        raise WorkbookLoadError(
            message="Invalid file format",
            detail="File appears to be corrupted or not a valid Excel file. "
            "Please try saving the file again in Excel format (.xlsx).",
        ) from e

    except InvalidFileException as e:
        error_str = str(e).lower()

        if "password" in error_str or "encrypted" in error_str:
            raise WorkbookLoadError(
                message="Password-protected file",
                detail="Cannot open password-protected Excel files",
            ) from e

        raise WorkbookLoadError(
            message="Invalid Excel file",
            detail=str(e),
        ) from e

    except MemoryError as e:
        raise WorkbookLoadError(
            message="File too large",
            detail="The file is too large to process",
        ) from e

    except KeyError as e:
        # Valid ZIP but missing required parts (e.g. [Content_Types].xml)
        raise WorkbookLoadError(
            message="Invalid Excel file",
            detail="File is a valid ZIP archive but not a valid Excel workbook (missing required components)",
        ) from e

    except Exception as e:
        error_type = type(e).__name__
        raise WorkbookLoadError(
            message="Failed to load workbook",
            detail=f"Unexpected error ({error_type}): {str(e)}",
        ) from e


def load_with_timeout(
    file_bytes: bytes,
    timeout: float | None,
    loader: Callable[[bytes], Any] = load_workbook_safe,
) -> Any:
    """Run ``loader(file_bytes)`` and abandon it after ``timeout`` seconds.

    The worker thread is not interrupted; its result is simply discarded.

    Raises:
        WorkbookLoadError: On timeout, or whatever the loader raises
    """
    if timeout is None:
        return loader(file_bytes)

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="template-load")
    future = executor.submit(loader, file_bytes)
    try:
        return future.result(timeout=timeout)
    except FutureTimeoutError as e:
        future.cancel()
        raise WorkbookLoadError(
            message="Template load timed out",
            detail=f"File loading timeout after {timeout:g} seconds",
        ) from e
    finally:
        executor.shutdown(wait=False)


def get_first_worksheet(wb: Workbook) -> "Worksheet":
    """Return the first worksheet in tab order.

    Raises:
        NoWorksheetError: If the workbook has no worksheets
    """
    if not wb.worksheets:
        raise NoWorksheetError()
    return wb.worksheets[0]
