"""JSON output of filtered comments."""

import json
import logging
import sys
from typing import List, Optional, TextIO

from hn_scraper.errors import OutputWriteError
from hn_scraper.models.comment import CommentRecord
from hn_scraper.models.mapping import records_to_dicts

logger = logging.getLogger(__name__)


class JsonOutputSink:
    """Writes comments as a single JSON array to a file or standard output."""

    def __init__(self, out_path: Optional[str] = None, indent: Optional[int] = None):
        """
        Initialize the sink.

        Args:
            out_path: File to write; standard output when None or empty
            indent: JSON indentation, compact output when None
        """
        self.out_path = out_path or None
        self.indent = indent

    @property
    def destination(self) -> str:
        return self.out_path or "<stdout>"

    def dump(self, stream: TextIO, comments: List[CommentRecord]) -> None:
        """Write comments as a JSON array, followed by a newline, to an open stream."""
        json.dump(records_to_dicts(comments), stream, ensure_ascii=False, indent=self.indent)
        stream.write("\n")

    def write(self, comments: List[CommentRecord]) -> int:
        """
        Write comments to the destination.

        Nothing is written, and no file is created, when there are no comments.

        Returns:
            Number of comments written

        Raises:
            OutputWriteError: If the destination cannot be written
        """
        if not comments:
            logger.info("No results found based on the keywords supplied. Not writing output")
            return 0

        if self.out_path is None:
            self.dump(sys.stdout, comments)
            sys.stdout.flush()
        else:
            try:
                with open(self.out_path, "w", encoding="utf-8") as file:
                    self.dump(file, comments)
            except OSError as e:
                raise OutputWriteError(self.out_path, str(e)) from e

        logger.info(f"Wrote {len(comments)} comments to {self.destination}")
        return len(comments)
