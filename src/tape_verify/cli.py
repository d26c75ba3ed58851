import json
from pathlib import Path
import click
from tape_core.cartridge import extract
from tape_core.envelope import normalize
from tape_core.errors import TapeError
from .evidence import chunk_evidence, write_evidence
from .logic import verify_tape_file

JSON_KW = {"sort_keys": True, "separators": (",", ":"), "ensure_ascii": False}

@click.group()
def main():
    pass

@main.command("tape")
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--strict", is_flag=True, help="Fail on any chunk with a bad CRC")
def tape_cmd(paths: tuple[Path, ...], strict: bool):
    failed = False
    for path in paths:
        result = verify_tape_file(path, strict=strict)
        failed = failed or result["status"] != "PASS"
        click.echo(json.dumps(result, **JSON_KW))
    if failed:
        raise SystemExit(1)

@main.command("extract")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--raw", is_flag=True, help="Print the payload as stored, without normalizing")
@click.option("--strict", is_flag=True, help="Fail on any chunk with a bad CRC")
def extract_cmd(path: Path, raw: bool, strict: bool):
    try:
        payload = extract(path.read_bytes(), strict=strict)
        out = payload if raw else normalize(payload).to_dict()
    except (TapeError, TypeError) as e:
        click.echo(f"FATAL: {e}")
        raise SystemExit(1)
    click.echo(json.dumps(out, indent=2, ensure_ascii=False))

@main.command("chunks")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--evidence", type=click.Path(dir_okay=False, path_type=Path), help="Also write the table as Parquet")
def chunks_cmd(path: Path, evidence: Path | None):
    try:
        rows = chunk_evidence(path.read_bytes())
    except TapeError as e:
        click.echo(f"FATAL: {e}")
        raise SystemExit(1)
    for row in rows:
        keyword = f"  {row['keyword']}" if row["keyword"] else ""
        click.echo(f"{row['offset']:>10}  {row['type']}  {row['length']:>10}  {row['crc']:08x}  {row['status']}{keyword}")
    if evidence is not None:
        write_evidence(rows, evidence)
        click.echo(f"Evidence written to {evidence}")

if __name__ == "__main__":
    main()
