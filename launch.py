#!/usr/bin/env python3
"""
Asset Rehomer - Model Viewer

Converts a model, shows its scene tree and dependencies, and reconverts
whenever the model or one of its scripts changes on disk.

Usage:
    python launch.py path/to/model.gltf [--script fix.py] [--target-root assets]
"""

import argparse
import logging
import sys
from pathlib import Path

# Setup paths
root_dir = Path(__file__).parent
src_dir = root_dir / "src"
sys.path.insert(0, str(src_dir))

# Version info
VERSION = "1.0.0"
APP_NAME = "Asset Rehomer"


def get_version() -> str:
    """Get version from VERSION file or fallback."""
    version_file = root_dir / "VERSION"
    if version_file.exists():
        return version_file.read_text().strip()
    return VERSION


def show_splash():
    """Show splash screen info."""
    version = get_version()
    banner = f"""
╔══════════════════════════════════════════════════════════════════════╗
║                                                                      ║
║   {APP_NAME:<20}  Model Viewer                                   ║
║   Version {version:<10}                                                 ║
║                                                                      ║
║   Watches a model and its scripts, reconverting on every change      ║
║                                                                      ║
╚══════════════════════════════════════════════════════════════════════╝
"""
    print(banner)


def check_dependencies():
    """Check that required dependencies are available."""
    missing = []

    try:
        import dearpygui
    except ImportError:
        missing.append("dearpygui")

    try:
        import numpy
    except ImportError:
        missing.append("numpy")

    try:
        import PIL
    except ImportError:
        missing.append("Pillow")

    if missing:
        print("\n⚠️  Missing dependencies:")
        for dep in missing:
            print(f"   - {dep}")
        print("\n   Install with: pip install -e .\n")
        return False

    return True


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description=f"{APP_NAME} model viewer")
    parser.add_argument('model', help='Model file to watch')
    parser.add_argument('--source-root', help='Asset root of the model (default: the model\'s folder)')
    parser.add_argument('--target-root', help='Where converted assets are written (default: assets)')
    parser.add_argument('--target-path', help='Asset path inside the target root (default: Models/<name>)')
    parser.add_argument('--script', action='append', default=[], help='Model script to run (repeatable)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    return parser.parse_args(argv)


def main(argv=None):
    """Launch the viewer."""
    args = parse_args(argv)
    show_splash()

    if not check_dependencies():
        return 1

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        from rehomer.core import Convert
        from rehomer.errors import ConversionError
        from rehomer.viewer import ModelWatcher
        from rehomer.viewer.panel import ViewerApp

        convert = Convert()
        if args.source_root:
            convert.set_source_root(args.source_root)
        if args.target_root:
            convert.set_target_root(args.target_root)
        if args.target_path:
            convert.set_target_asset_path(args.target_path)

        watcher = ModelWatcher(args.model, convert)
        for script in args.script:
            watcher.add_model_script(script)

        print("Starting viewer...")

        app = ViewerApp(watcher)
        app.show()

        print("Viewer ready.\n")

        app.run()
        app.shutdown()

        print("\nViewer closed.")
        return 0

    except ImportError as e:
        print(f"\n❌ Error: Failed to import required modules: {e}")
        print("\n   Make sure you have installed dependencies:")
        print("   pip install -e .")
        return 1
    except ConversionError as e:
        print(f"\n❌ Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
