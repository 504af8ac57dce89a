import pathlib
import sys
sys.path.append(str(pathlib.Path(__file__).parent / "src"))

if __name__ == "__main__":
    from ossdir.boot.boot import init_ossdir
    from ossdir.cli.commands import main

    init_ossdir("cli")

    main()
