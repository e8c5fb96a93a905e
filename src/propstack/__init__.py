def main() -> None:
    """パッケージエントリポイント。cli.main() に委譲する。

    pyproject.toml の [project.scripts] は propstack.cli:main を直接参照するため、
    この関数はプログラムから propstack.main() として呼び出す場合の互換用。
    """
    from propstack.cli import main as cli_main

    cli_main()
