import pathlib
def report_path(output_dir: str, file_name: str) -> pathlib.Path:
    p = pathlib.Path(output_dir)
    p.mkdir(parents=True, exist_ok=True)
    return p / file_name
def write_report(path: pathlib.Path, text: str) -> pathlib.Path:
    path.write_text(text, encoding="utf-8")
    return path
