import json
from pathlib import Path
import click
from .logic import verify_r1cs

@click.group()
def main():
    pass

@main.command("file")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--no-field-check", is_flag=True, help="Skip the coefficient < prime range check")
def file_cmd(path: Path, no_field_check: bool):
    result = verify_r1cs(path, check_field=not no_field_check)
    click.echo(json.dumps(result, sort_keys=True, separators=(",", ":"), ensure_ascii=False))
    if result["status"] != "PASS":
        raise SystemExit(1)

if __name__ == "__main__":
    main()
