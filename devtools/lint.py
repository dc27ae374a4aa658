import subprocess

from rich import print as rprint

LINT_PATHS = ["holocron", "devtools"]


def _run(cmd: list[str]) -> int:
    rprint(f"[bold green]❯ {' '.join(cmd)}[/bold green]")
    try:
        subprocess.run(cmd, text=True, check=True)
    except subprocess.CalledProcessError as e:
        rprint(f"[bold red]Error: {e}[/bold red]")
        return 1
    finally:
        rprint()
    return 0


def main() -> int:
    rprint()

    errcount = sum(
        _run(cmd)
        for cmd in [
            ["usort", "format", *LINT_PATHS],
            ["ruff", "check", "--fix", *LINT_PATHS],
            ["black", *LINT_PATHS],
        ]
    )

    if errcount:
        rprint(f"[bold red]✗ Lint failed ({errcount} of 3 tools reported errors).[/bold red]")
    else:
        rprint("[bold green]✔️ Lint passed![/bold green]")
    rprint()

    return errcount


if __name__ == "__main__":
    raise SystemExit(main())
