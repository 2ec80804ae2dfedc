"""
Output layout.

    {output_path}/{postscript_name}/css/{postscript_name}.css
    {output_path}/{postscript_name}/webfonts/{postscript_name}_{index}.{format}
"""

from dataclasses import dataclass
from pathlib import Path

CSS_DIR_NAME = "css"
WEBFONTS_DIR_NAME = "webfonts"


@dataclass(frozen=True)
class OutputLayout:
    """Paths of every artifact produced for one source font."""

    output_path: Path
    base_name: str  # PostScript name of the source font

    @property
    def root_dir(self) -> Path:
        return self.output_path / self.base_name

    @property
    def css_dir(self) -> Path:
        return self.root_dir / CSS_DIR_NAME

    @property
    def webfonts_dir(self) -> Path:
        return self.root_dir / WEBFONTS_DIR_NAME

    @property
    def css_file(self) -> Path:
        return self.css_dir / f"{self.base_name}.css"

    def font_file_name(self, rule_index: int, extension: str) -> str:
        return f"{self.base_name}_{rule_index}.{extension}"

    def font_file(self, rule_index: int, extension: str) -> Path:
        return self.webfonts_dir / self.font_file_name(rule_index, extension)
