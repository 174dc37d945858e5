#!/usr/bin/env python3
"""script2app - wrap a script in a macOS application bundle.

This module asks the operator for an app name, a version, an optional PNG
icon and a script, then builds::

    ~/<name>.app/Contents/MacOS/<name>
    ~/<name>.app/Contents/Resources/<name>.icns
    ~/<name>.app/Contents/Info.plist

Signing, notarization and stapling are not performed. The steps are shown
as instructions once the bundle is ready.

Usage (CLI):
    # Ask with macOS dialogs
    script2app

    # Ask in the terminal, keep .DS_Store cleanup inside the bundle folder
    script2app --terminal --cleanup-dir ~/MyApp.app

Usage (API):
    from script2app import make_app

    bundle_path = make_app("MyApp", "run.sh", icon="icon.png", version="2.0")
"""

import argparse
import datetime
import enum
import logging
import os
import re
import shutil
import stat
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from xml.sax.saxutils import escape

from PIL import Image

# ----------------------------------------------------------------------------
# Constants

__version__ = "0.1.0"

# Type aliases
Pathlike = Path | str

# Label used in the run log and as the logger name
LABEL = "script2app"

# Default bundle extension
DEFAULT_BUNDLE_EXT = ".app"

# Default answer for the version prompt
DEFAULT_VERSION = "1.0"

# Answer to the icon prompt that means "no icon"
SKIP_ICON = "Skip"

# Environment variable names
ENV_OUTPUT_DIR = "SCRIPT2APP_OUTPUT_DIR"
ENV_LOG_FILE = "SCRIPT2APP_LOG_FILE"

# Append-only run log
DEFAULT_LOG_FILE = Path.home() / "Library" / "Logs" / f"{LABEL}.log"

# Icon sizes rendered at their own pixel size
ICON_SIZES = [16, 32, 64, 128, 256, 512]

# Icon sizes rendered at this pixel size but named for half of it
RETINA_ICON_SIZES = [32, 64, 256, 512]

# Density suffix appended to double density icon names
RETINA_SUFFIX = "x2"

# OS metadata files removed from the cleanup directory
HIDDEN_FILE_PATTERN = re.compile(r"^\.DS_Store")

RESAMPLERS = ["sips", "pillow"]

INFO_PLIST_TMPL = """\
<?xml version="1.0" encoding="UTF-8"?>
<!DOCTYPE plist PUBLIC "-//Apple//DTD PLIST 1.0//EN" "http://www.apple.com/DTDs/PropertyList-1.0.dtd">
<plist version="1.0">
<dict>
\t<key>CFBundleIconFile</key>
\t<string>{icon_file}</string>
\t<key>CFBundleShortVersionString</key>
\t<string>{bundle_version}</string>
</dict>
</plist>
"""

PREREQUISITES = (
    "This app will ask for user input, so editing the script variables "
    "manually should not be needed.\n"
    "After the script has finished, you are left with an app in your "
    "$HOME folder.\n\n"
    "You dont need to do anything else, but if you plan to use the app on "
    "other computers, you want to sign, notarize and staple it, before "
    "distribution.\n\n"
    "You will need the following:\n\n"
    "• A script you want the app to run\n"
    "• An icon PNG file"
)

NAME_PROMPT = "Please enter the name of your App"
VERSION_PROMPT = "Please enter the version of your App"
ICON_PROMPT = (
    "Path to the icon png file. (Drag'n Drop is supported).\n"
    "To skip the icon, just click Continue"
)
SCRIPT_PROMPT = "Path to your script (Drag'n Drop is supported)"

NEXT_STEPS = """\
1. Sign the app using codesign:
codesign --deep -s "Apple Development: yourdevID@domain.dk (XYZXYZXYZ)" YOURAPP.app

After the app is signed, you need to notarize it.
For this you first create a keychain item for your Apple ID, to be used later in the process.
If you prefer to watch a video guide: https://www.youtube.com/watch?v=2xJcMzoi0EI
Of course, if you already have the keychain item, you can skip step 1 and 2 below.

1. Run this command, and make a note of the WWDRTeamID, aka Team ID:
   xcrun altool --list-providers -u "YOUR_APPLE_ID"
2. Run this command, and choose any Profile name you like, and use your App Password:
   xcrun notarytool store-credentials --apple-id "YOUR_APPLE_ID" --password "YOUR_APP_PASSWORD" --team-id "THE_ID_FROM_STEP_1"
3. Zip the app before submitting for notarization.
4. Now you can notarize the zip file, using this command:
   xcrun notarytool submit YOURAPP.zip --keychain-profile "PROFILE_NAME_FROM_STEP_2" --wait

So, now your app is notarized, the last step is to staple the app.

1. Unzip the app again.
2. The staple process needs to be able to write to the app bundle, so run this:
   chmod -R 755 YOURAPP.app
3. To staple the app, simply run this command:
   xcrun stapler staple -v YOURAPP.app

When the app has been stapled, you can package it for distribution.
This can be as zip, pkg or dmg.
If you choose pkg or dmg, you need to sign and notarize the package as well.
"""

# ----------------------------------------------------------------------------
# dotenv support


def _load_dotenv() -> None:
    """Load a .env file from the current directory, if present."""
    from dotenv import load_dotenv

    load_dotenv()


_load_dotenv()

# ----------------------------------------------------------------------------
# Configuration file support


def load_config(config_path: Path | None = None) -> dict[str, object]:
    """Load configuration from a TOML file.

    Searches for configuration in the following order:
    1. Explicit config_path if provided
    2. .script2app.toml in current directory
    3. script2app.toml in current directory

    Args:
        config_path: Optional explicit path to config file

    Returns:
        Configuration dictionary (empty if no config found)

    Raises:
        ConfigurationError: If a config file exists but cannot be parsed

    Example .script2app.toml:
        [create]
        version = "2.0"
        output_dir = "~/Applications"
        cleanup_dir = "."
        resampler = "pillow"
        log_file = "~/Library/Logs/script2app.log"
    """
    if sys.version_info >= (3, 11):
        import tomllib
    else:
        import tomli as tomllib

    if config_path:
        paths_to_try = [Path(config_path)]
        if not paths_to_try[0].exists():
            raise ConfigurationError(f"Config file not found: {config_path}")
    else:
        cwd = Path.cwd()
        paths_to_try = [
            cwd / ".script2app.toml",
            cwd / "script2app.toml",
        ]

    for path in paths_to_try:
        if path.exists():
            try:
                with open(path, "rb") as f:
                    data: dict[str, object] = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ConfigurationError(f"Invalid config file {path}: {e}") from e
            return data

    return {}


def get_config_value(
    config: dict[str, object],
    section: str,
    key: str,
    default: str | None = None,
) -> str | None:
    """Get a value from config with section.key lookup.

    Args:
        config: Configuration dictionary
        section: Section name (e.g., "create")
        key: Key name within section
        default: Default value if not found

    Returns:
        Configuration value or default
    """
    section_config = config.get(section, {})
    if not isinstance(section_config, dict):
        return default
    value = section_config.get(key, default)
    if value is None or isinstance(value, str):
        return value
    return default


# ----------------------------------------------------------------------------
# Error handling


class BundlerError(Exception):
    """Base exception class for script2app errors."""


class CommandError(BundlerError):
    """Exception raised when a command fails."""

    def __init__(
        self, command: str, returncode: int, output: str | None = None
    ):
        self.command = command
        self.returncode = returncode
        self.output = output
        super().__init__(
            f"Command '{command}' failed with return code {returncode}"
        )


class FileError(BundlerError):
    """Exception raised when a file operation fails."""


class ConfigurationError(BundlerError):
    """Exception raised when configuration is invalid."""


class Outcome(enum.Enum):
    """How a run ended."""

    DONE = "done"
    CANCELLED = "cancelled"
    FAILED = "failed"

    @property
    def exit_code(self) -> int:
        return 1 if self is Outcome.FAILED else 0


# ----------------------------------------------------------------------------
# Logging configuration


class CustomFormatter(logging.Formatter):
    """Custom logging formatting class with color support."""

    class color:
        """Text colors for terminal output."""

        white = "\x1b[97;20m"
        grey = "\x1b[38;20m"
        green = "\x1b[32;20m"
        yellow = "\x1b[33;20m"
        red = "\x1b[31;20m"
        bold_red = "\x1b[31;1m"
        reset = "\x1b[0m"

    cfmt = (
        f"{color.white}%(delta)s{color.reset} - "
        f"{{}}%(levelname)s{color.reset} - "
        f"{color.white}%(name)s.%(funcName)s{color.reset} - "
        f"{color.grey}%(message)s{color.reset}"
    )

    FORMATS = {
        logging.DEBUG: cfmt.format(color.grey),
        logging.INFO: cfmt.format(color.green),
        logging.WARNING: cfmt.format(color.yellow),
        logging.ERROR: cfmt.format(color.red),
        logging.CRITICAL: cfmt.format(color.bold_red),
    }

    def __init__(self, use_color: bool = True):
        self.use_color = use_color
        self.fmt = (
            "%(delta)s - %(levelname)s - %(name)s.%(funcName)s - %(message)s"
        )

    def format(self, record: logging.LogRecord) -> str:
        """Format the log record with color if enabled."""
        if not self.use_color:
            log_fmt = self.fmt
        else:
            log_fmt = self.FORMATS[record.levelno]
        duration = datetime.datetime.fromtimestamp(
            record.relativeCreated / 1000, datetime.timezone.utc
        )
        record.delta = duration.strftime("%H:%M:%S")
        formatter = logging.Formatter(log_fmt)
        return formatter.format(record)


class RunLogFormatter(logging.Formatter):
    """Plain ``<timestamp> [script2app] <message>`` lines for the run log."""

    def __init__(self, label: str = LABEL):
        super().__init__(
            f"%(asctime)s [{label}] %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        )


def setup_logging(
    debug: bool = False,
    use_color: bool = True,
    log_file: Pathlike | None = None,
) -> None:
    """Configure logging for the application.

    Args:
        debug: Whether to enable debug logging
        use_color: Whether to use colored output
        log_file: Append-only run log; None disables it
    """
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(CustomFormatter(use_color))
    handlers: list[logging.Handler] = [stream_handler]
    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(RunLogFormatter())
        handlers.append(file_handler)
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        handlers=handlers,
        force=True,
    )


# ----------------------------------------------------------------------------
# Command execution utilities


def run_command(
    command: list[str],
    log: logging.Logger | None = None,
) -> str:
    """Run a command and return its output.

    Uses shell=False, so paths with spaces need no quoting.

    Args:
        command: The command as a list of arguments
        log: Optional logger for debug output

    Returns:
        The command stdout output

    Raises:
        CommandError: If the command fails
    """
    cmd_str = " ".join(command)
    if log:
        log.debug("%s", cmd_str)
    try:
        result = subprocess.run(
            command, shell=False, check=True, text=True, capture_output=True
        )
        return result.stdout
    except subprocess.CalledProcessError as e:
        raise CommandError(cmd_str, e.returncode, e.stderr or e.output) from e


def normalize_path(answer: str) -> str:
    """Turn a typed or drag-and-dropped path into a plain path string.

    Terminals quote or backslash-escape dropped paths, e.g.
    ``'/Users/me/My Icon.png'`` or ``/Users/me/My\\ Icon.png``.
    """
    answer = answer.strip()
    if len(answer) >= 2 and answer[0] == answer[-1] and answer[0] in "'\"":
        answer = answer[1:-1]
    else:
        answer = re.sub(r"\\(.)", r"\1", answer)
    return os.path.expanduser(answer)


# ----------------------------------------------------------------------------
# Prompting


class Prompter:
    """Asks the operator questions. Subclasses pick the medium."""

    def confirm(self, title: str, message: str) -> bool:
        """Show message with Cancel/Continue; False means cancel."""
        raise NotImplementedError

    def ask(self, message: str, default: str = "") -> str | None:
        """Ask for text; None means cancel."""
        raise NotImplementedError

    def notify(self, title: str, message: str) -> None:
        """Show message with a single OK button."""
        raise NotImplementedError


def _applescript_string(text: str) -> str:
    text = text.replace("\\", "\\\\").replace('"', '\\"')
    return '"' + text.replace("\n", "\\n") + '"'


class DialogPrompter(Prompter):
    """Modal macOS dialogs driven by ``osascript``.

    ``display dialog`` raises "User canceled" (-128) when Cancel is pressed,
    which makes osascript exit with status 1.
    """

    BUTTONS = '{"Cancel","Continue"}'

    def __init__(self) -> None:
        self.log = logging.getLogger(self.__class__.__name__)

    def _osascript(self, script: str) -> str | None:
        self.log.debug("osascript -e %s", script)
        result = subprocess.run(
            ["osascript", "-e", script], text=True, capture_output=True
        )
        if result.returncode != 0:
            self.log.debug("osascript: %s", result.stderr.strip())
            return None
        return result.stdout.rstrip("\n")

    def confirm(self, title: str, message: str) -> bool:
        script = (
            f"display dialog {_applescript_string(message)} "
            f"with title {_applescript_string(title)} "
            f"buttons {self.BUTTONS} default button 2"
        )
        return self._osascript(script) is not None

    def ask(self, message: str, default: str = "") -> str | None:
        script = (
            "set dialogText to text returned of (display dialog "
            f"{_applescript_string(message)} "
            f"default answer {_applescript_string(default)} "
            f"buttons {self.BUTTONS} default button 2)\n"
            "return dialogText"
        )
        return self._osascript(script)

    def notify(self, title: str, message: str) -> None:
        script = (
            f"display dialog {_applescript_string(message)} "
            f'with title {_applescript_string(title)} buttons {{"OK"}}'
        )
        self._osascript(script)


class TerminalPrompter(Prompter):
    """Same questions on stdin/stdout. EOF or Ctrl-C at a prompt cancels."""

    CONTINUE = ("", "y", "yes", "c", "continue")
    CANCEL = ("n", "no", "cancel")

    def _input(self, prompt: str) -> str | None:
        try:
            return input(prompt)
        except (EOFError, KeyboardInterrupt):
            print()
            return None

    def confirm(self, title: str, message: str) -> bool:
        print(f"\n{title}\n\n{message}\n")
        while True:
            answer = self._input("Continue? [Y/n] ")
            if answer is None:
                return False
            answer = answer.strip().lower()
            if answer in self.CONTINUE:
                return True
            if answer in self.CANCEL:
                return False
            print("Please answer 'y' to continue or 'n' to cancel.")

    def ask(self, message: str, default: str = "") -> str | None:
        suffix = f" [{default}]" if default else ""
        answer = self._input(f"{message}{suffix}: ")
        if answer is None:
            return None
        return answer if answer.strip() else default

    def notify(self, title: str, message: str) -> None:
        print(f"\n{title}\n\n{message}")


# ----------------------------------------------------------------------------
# Session parameters


@dataclass(frozen=True)
class Session:
    """Answers collected for a single run."""

    name: str
    version: str
    icon: Path | None
    script: Path


def collect_session(
    prompter: Prompter,
    default_version: str = DEFAULT_VERSION,
    show_prerequisites: bool = True,
) -> Session | None:
    """Ask the operator for everything a run needs.

    Returns None as soon as any prompt is cancelled. An empty app name or
    script path counts as a cancel.
    """
    log = logging.getLogger(LABEL)

    def cancelled() -> None:
        log.info("User clicked cancel")

    if show_prerequisites and not prompter.confirm("Prerequisites", PREREQUISITES):
        return cancelled()

    answer = prompter.ask(NAME_PROMPT, "")
    if answer is None or not answer.strip():
        return cancelled()
    name = answer.strip()

    answer = prompter.ask(VERSION_PROMPT, default_version)
    if answer is None:
        return cancelled()
    version = answer.strip() or DEFAULT_VERSION

    answer = prompter.ask(ICON_PROMPT, SKIP_ICON)
    if answer is None:
        return cancelled()
    icon = None
    if answer.strip() and answer.strip().lower() != SKIP_ICON.lower():
        icon = Path(normalize_path(answer))

    answer = prompter.ask(SCRIPT_PROMPT, "")
    if answer is None or not answer.strip():
        return cancelled()
    script = Path(normalize_path(answer))

    return Session(name=name, version=version, icon=icon, script=script)


# ----------------------------------------------------------------------------
# External tools


class Resampler:
    """Writes a square PNG of `size` pixels rendered from `source`."""

    def resample(self, source: Path, size: int, output: Path) -> None:
        raise NotImplementedError


class SipsResampler(Resampler):
    """Resample with the macOS ``sips`` utility."""

    def __init__(self) -> None:
        self.log = logging.getLogger(self.__class__.__name__)

    def resample(self, source: Path, size: int, output: Path) -> None:
        run_command(
            [
                "sips",
                "-z",
                str(size),
                str(size),
                str(source),
                "--out",
                str(output),
            ],
            log=self.log,
        )


class PillowResampler(Resampler):
    """Resample in-process with Pillow."""

    def resample(self, source: Path, size: int, output: Path) -> None:
        with Image.open(source) as img:
            img.resize((size, size), Image.LANCZOS).save(output, format="PNG")


class IconCompiler:
    """Compiles an iconset directory into an .icns container."""

    def compile(self, iconset: Path, output: Path) -> Path | None:
        raise NotImplementedError


class IconutilCompiler(IconCompiler):
    """Compile with ``iconutil``. Success means the output file exists."""

    def __init__(self) -> None:
        self.log = logging.getLogger(self.__class__.__name__)

    def compile(self, iconset: Path, output: Path) -> Path | None:
        try:
            run_command(
                ["iconutil", "--convert", "icns", str(iconset), "-o", str(output)],
                log=self.log,
            )
        except CommandError as e:
            self.log.error("%s: %s", e, (e.output or "").strip())
        return output if output.is_file() else None


class AttributeCleaner:
    """Removes extended attributes from a directory tree."""

    def clear(self, path: Path) -> None:
        raise NotImplementedError


class XattrCleaner(AttributeCleaner):
    """``xattr -cr``."""

    def __init__(self) -> None:
        self.log = logging.getLogger(self.__class__.__name__)

    def clear(self, path: Path) -> None:
        run_command(["xattr", "-cr", str(path)], log=self.log)


def get_resampler(name: str) -> Resampler:
    """Return the resampler registered under `name`."""
    if name == "sips":
        return SipsResampler()
    if name == "pillow":
        return PillowResampler()
    raise ConfigurationError(
        f"Unknown resampler '{name}' (expected one of: {', '.join(RESAMPLERS)})"
    )


def probe_icon_source(source: Path) -> tuple[int, int] | None:
    """Return the (width, height) of a usable square icon source, else None."""
    log = logging.getLogger(LABEL)
    try:
        with Image.open(source) as img:
            width, height = img.size
    except OSError as e:
        log.error("Unable to open icon %s: %s", source, e)
        return None
    if width != height:
        log.error("Icon %s is not square (%dx%d)", source, width, height)
        return None
    if width < max(ICON_SIZES + RETINA_ICON_SIZES):
        log.warning("Icon %s is only %dx%d, it will be upscaled", source, width, height)
    return width, height


def iconset_members() -> list[tuple[str, int]]:
    """(file name, pixel size) of every image staged in an iconset."""
    members = [(f"icon_{size}x{size}.png", size) for size in ICON_SIZES]
    for size in RETINA_ICON_SIZES:
        half = size // 2
        members.append((f"icon_{half}x{half}{RETINA_SUFFIX}.png", size))
    return members


# ----------------------------------------------------------------------------
# Bundle folder and structure classes


class BundleFolder:
    """Manages a folder within the bundle structure."""

    def __init__(self, path: Pathlike):
        self.path = Path(path)

    def create(self) -> None:
        """Create the bundle folder if it doesn't exist."""
        if not self.path.exists():
            self.path.mkdir(exist_ok=True, parents=True)
        if not self.path.is_dir():
            raise FileError(f"{self.path} is not a directory")


class AppBuilder:
    """Builds a script app bundle from a Session.

    Args:
        session: Answers collected from the operator
        output_dir: Folder that receives ``<name>.app`` (default: home)
        cleanup_dir: Folder swept for .DS_Store files (default: cwd)
        resampler: Icon resampler (default: SipsResampler)
        compiler: Icon container compiler (default: IconutilCompiler)
        cleaner: Extended attribute cleaner (default: XattrCleaner)
        extension: Bundle extension (default: DEFAULT_BUNDLE_EXT)

    Example:
        builder = AppBuilder(Session("MyApp", "1.0", None, Path("run.sh")))
        builder.create()
    """

    def __init__(
        self,
        session: Session,
        output_dir: Pathlike | None = None,
        cleanup_dir: Pathlike | None = None,
        resampler: Resampler | None = None,
        compiler: IconCompiler | None = None,
        cleaner: AttributeCleaner | None = None,
        extension: str = DEFAULT_BUNDLE_EXT,
    ):
        self.session = session
        self.output_dir = Path(output_dir) if output_dir else Path.home()
        self.cleanup_dir = Path(cleanup_dir) if cleanup_dir else Path.cwd()
        self.resampler = resampler or SipsResampler()
        self.compiler = compiler or IconutilCompiler()
        self.cleaner = cleaner or XattrCleaner()
        self.log = logging.getLogger(LABEL)

        name = session.name

        # Bundle structure paths
        self.bundle = self.output_dir / (name + extension)
        self.contents = self.bundle / "Contents"
        self.macos = BundleFolder(self.contents / "MacOS")
        self.resources = BundleFolder(self.contents / "Resources")

        # Files
        self.info_plist = self.contents / "Info.plist"
        self.executable = self.macos.path / name
        self.iconset = self.resources.path / f"{name}.iconset"
        self.icns = self.resources.path / f"{name}.icns"

    def create_scaffold(self) -> None:
        """Create Contents/MacOS and Contents/Resources."""
        self.log.info("Creating bundle at %s", self.bundle)
        self.macos.create()
        self.resources.create()

    def create_icon(self) -> bool:
        """Render the iconset and compile it into <name>.icns.

        Returns False when no container was produced. A skipped icon is
        not a failure.
        """
        source = self.session.icon
        if source is None:
            self.log.info("No icon given, skipping icon creation")
            return True

        if probe_icon_source(source) is None:
            self.log.error("Failed to create icons")
            return False

        BundleFolder(self.iconset).create()
        try:
            for filename, size in iconset_members():
                self.resampler.resample(source, size, self.iconset / filename)
        except (BundlerError, OSError) as e:
            self.log.error("Unable to resample %s: %s", source, e)
            self.log.error("Failed to create icons")
            return False

        if self.compiler.compile(self.iconset, self.icns) is None:
            self.log.error("Failed to create icons")
            return False

        shutil.rmtree(self.iconset)
        self.log.info("Added icon: %s", self.icns.name)
        return True

    def create_info_plist(self) -> None:
        """Write the two-key Info.plist."""
        content = INFO_PLIST_TMPL.format(
            icon_file=escape(self.session.name),
            bundle_version=escape(self.session.version),
        )
        with open(self.info_plist, "w", encoding="utf-8") as fopen:
            fopen.write(content)

    def install_script(self) -> None:
        """Copy the script to Contents/MacOS/<name> and make it executable."""
        shutil.copyfile(self.session.script, self.executable)
        oldmode = os.stat(self.executable).st_mode
        os.chmod(
            self.executable,
            oldmode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH,
        )
        self.log.info("Installed %s as %s", self.session.script, self.executable)

    def remove_hidden_files(self) -> list[Path]:
        """Delete top-level .DS_Store files in cleanup_dir."""
        removed = []
        for entry in sorted(self.cleanup_dir.iterdir()):
            if HIDDEN_FILE_PATTERN.match(entry.name) and entry.is_file():
                self.log.info("Found DS_Store file, deleting...")
                entry.unlink()
                removed.append(entry)
        return removed

    def sanitize(self) -> None:
        """Prepare the bundle for signing."""
        self.remove_hidden_files()
        self.cleaner.clear(self.bundle)
        os.utime(self.bundle)

    def create(self) -> Outcome:
        """Create the complete bundle.

        Returns:
            Outcome.DONE, or Outcome.FAILED if the icon could not be built
        """
        self.create_scaffold()
        if not self.create_icon():
            return Outcome.FAILED
        self.create_info_plist()
        self.install_script()
        self.sanitize()
        self.log.info("Bundle created successfully: %s", self.bundle)
        return Outcome.DONE


# ----------------------------------------------------------------------------
# Driver


def run(
    prompter: Prompter,
    output_dir: Pathlike | None = None,
    cleanup_dir: Pathlike | None = None,
    resampler: Resampler | None = None,
    compiler: IconCompiler | None = None,
    cleaner: AttributeCleaner | None = None,
    default_version: str = DEFAULT_VERSION,
) -> Outcome:
    """Prompt, build and show the next steps. Returns how the run ended."""
    log = logging.getLogger(LABEL)
    log.info("========== LOG BEGIN ==========")

    session = collect_session(prompter, default_version=default_version)
    if session is None:
        return Outcome.CANCELLED

    builder = AppBuilder(
        session,
        output_dir=output_dir,
        cleanup_dir=cleanup_dir,
        resampler=resampler,
        compiler=compiler,
        cleaner=cleaner,
    )
    outcome = builder.create()
    if outcome is Outcome.DONE:
        prompter.notify("Optional next steps", NEXT_STEPS)
    return outcome


# ----------------------------------------------------------------------------
# Functional API


def make_app(
    name: str,
    script: Pathlike,
    icon: Pathlike | None = None,
    version: str = DEFAULT_VERSION,
    output_dir: Pathlike | None = None,
    cleanup_dir: Pathlike | None = None,
    resampler: Resampler | None = None,
    compiler: IconCompiler | None = None,
    cleaner: AttributeCleaner | None = None,
) -> Path | None:
    """Create a script app bundle without prompting.

    Returns:
        Path to the created bundle, or None if the icon could not be built

    Example:
        bundle_path = make_app("MyApp", "run.sh", version="2.0")
    """
    session = Session(
        name=name,
        version=version,
        icon=Path(icon) if icon else None,
        script=Path(script),
    )
    builder = AppBuilder(
        session,
        output_dir=output_dir,
        cleanup_dir=cleanup_dir,
        resampler=resampler,
        compiler=compiler,
        cleaner=cleaner,
    )
    if builder.create() is Outcome.FAILED:
        return None
    return builder.bundle


# ----------------------------------------------------------------------------
# Command-line interface


def _expand(path: str | None) -> Path | None:
    return Path(path).expanduser() if path else None


def main(argv: list[str] | None = None) -> None:
    """Command line interface for script2app."""
    try:
        parser = argparse.ArgumentParser(
            prog="script2app",
            description="Wrap a script in a macOS .app bundle.",
            epilog=(
                "Examples:\n"
                "  script2app\n"
                "  script2app --terminal --resampler pillow\n"
                "  script2app --output-dir ~/Applications --cleanup-dir .\n"
            ),
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        parser.add_argument(
            "-o",
            "--output-dir",
            metavar="DIR",
            help=f"folder that receives the .app (or set {ENV_OUTPUT_DIR}; default: $HOME)",
        )
        parser.add_argument(
            "--cleanup-dir",
            metavar="DIR",
            help="folder swept for .DS_Store files (default: current directory)",
        )
        parser.add_argument(
            "--resampler",
            choices=RESAMPLERS,
            help="icon resampler (default: sips)",
        )
        parser.add_argument(
            "--terminal",
            action="store_true",
            help="ask in the terminal instead of with dialogs",
        )
        parser.add_argument(
            "-c",
            "--config",
            metavar="FILE",
            help="path to a TOML config file",
        )
        parser.add_argument(
            "--log-file",
            metavar="FILE",
            help=f"run log (or set {ENV_LOG_FILE}; default: {DEFAULT_LOG_FILE})",
        )
        parser.add_argument(
            "--verbose",
            action="store_true",
            help="enable verbose/debug logging",
        )
        parser.add_argument(
            "--no-color",
            action="store_true",
            help="disable colored output",
        )
        parser.add_argument(
            "-V",
            "--version",
            action="version",
            version=f"%(prog)s {__version__}",
        )
        args = parser.parse_args(argv)

        config = load_config(_expand(args.config))
        log_file = (
            args.log_file
            or get_config_value(config, "create", "log_file")
            or os.getenv(ENV_LOG_FILE)
            or DEFAULT_LOG_FILE
        )
        setup_logging(args.verbose, not args.no_color, _expand(str(log_file)))

        output_dir = (
            args.output_dir
            or get_config_value(config, "create", "output_dir")
            or os.getenv(ENV_OUTPUT_DIR)
        )
        cleanup_dir = args.cleanup_dir or get_config_value(
            config, "create", "cleanup_dir"
        )
        resampler = (
            args.resampler
            or get_config_value(config, "create", "resampler")
            or "sips"
        )
        default_version = (
            get_config_value(config, "create", "version", DEFAULT_VERSION)
            or DEFAULT_VERSION
        )

        prompter = TerminalPrompter() if args.terminal else DialogPrompter()
        outcome = run(
            prompter,
            output_dir=_expand(output_dir),
            cleanup_dir=_expand(cleanup_dir),
            resampler=get_resampler(resampler),
            default_version=default_version,
        )
        sys.exit(outcome.exit_code)

    except BundlerError as e:
        logging.error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        sys.exit(130)
    except Exception as e:
        logging.error("Unexpected error: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
