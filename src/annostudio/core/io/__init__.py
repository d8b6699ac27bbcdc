from .fs import ensure_dir, write_text_atomic
from .json import read_json, dump_json
from .csv import write_csv
from .records import load_annotation_map, load_image_records

__all__ = [
    "ensure_dir",
    "write_text_atomic",
    "read_json",
    "dump_json",
    "write_csv",
    "load_annotation_map",
    "load_image_records",
]
