"""Show shadowlink binding an interface to a class it never imports directly."""

import abc
import argparse
import logging
import pathlib
import sys

TARGET: str = "fractions:Fraction"


def _ensure_src_path(src_path: str) -> None:
    """Ensure ``src`` is importable in the current interpreter.

    :param src_path: Absolute path to the repository ``src`` directory.
    """
    exists: bool = src_path in sys.path
    if exists is False:
        sys.path.insert(0, src_path)


def _parse_args() -> argparse.Namespace:
    """Parse command-line arguments.

    :returns: Parsed arguments.
    """
    parser = argparse.ArgumentParser(
        description="Bind a shadow interface to fractions.Fraction and call through it.",
    )
    parser.add_argument("--numerator", type=int, default=355, help="Numerator of the constructed fraction.")
    parser.add_argument("--denominator", type=int, default=113, help="Denominator of the constructed fraction.")
    parser.add_argument("--max-denominator", type=int, default=10, help="Bound passed to limit_denominator.")
    parser.add_argument("--verbose", action="store_true", help="Print shadowlink debug logging.")
    return parser.parse_args()


def main() -> int:
    """Run the demonstration.

    :returns: Process exit code where ``0`` indicates success.
    """
    args: argparse.Namespace = _parse_args()
    if int(args.denominator) == 0:
        print("denominator must not be 0")
        return 1
    if int(args.max_denominator) < 1:
        print("max-denominator must be >= 1")
        return 1

    repo_root: pathlib.Path = pathlib.Path(__file__).resolve().parent.parent
    _ensure_src_path(str(repo_root / "src"))
    if args.verbose is True:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    import shadowlink
    from shadowlink import Shadow
    from shadowlink import ShadowError
    from shadowlink import field
    from shadowlink import target

    @target(TARGET)
    class FractionShadow(Shadow):
        """View of ``Fraction`` through its private slots and public methods."""

        @field
        @target("_numerator")
        def numerator(self) -> int: ...

        @field
        @target("_denominator")
        def denominator(self) -> int: ...

        @abc.abstractmethod
        def limit_denominator(self, max_denominator: int) -> object: ...

        @abc.abstractmethod
        def as_integer_ratio(self) -> tuple[int, int]: ...

        def describe(self) -> str:
            return f"{self.numerator()}/{self.denominator()}"

    print("Shadowlink Demo")
    print(f"python={sys.version.split()[0]}")
    print(f"target={TARGET}")
    print("")

    try:
        fraction: FractionShadow = shadowlink.construct_shadow(
            FractionShadow,
            int(args.numerator),
            int(args.denominator),
        )
        print(f"constructed={fraction!r}")
        print(f"fields={fraction.describe()}")
        print(f"as_integer_ratio={fraction.as_integer_ratio()}")

        approximation: object = fraction.limit_denominator(int(args.max_denominator))
        print(f"limit_denominator({args.max_denominator})={approximation!r}")
    except ShadowError as exc:
        print(f"DEMO RESULT: FAIL ({type(exc).__name__}: {exc})")
        return 1

    print("")
    print("DEMO RESULT: PASS")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
