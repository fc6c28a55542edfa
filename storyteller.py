"""Life expectancy story viewer: opens the window or exports every scene to PNG."""

import argparse
import logging
import sys
from pathlib import Path

from life_story.config import CONFIG_PATH, load_config
from life_story.errors import StoryError
from life_story.records import load_csv

logger = logging.getLogger("storyteller")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Life expectancy narrative viewer")
    parser.add_argument("data", help="CSV with country,year,life_expectancy columns")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--config", type=Path, default=None, help=f"Config JSON (default {CONFIG_PATH})")
    parser.add_argument("--export", type=Path, default=None, metavar="DIR",
                        help="Write scene-<n>.png for every scene instead of opening a window")
    parser.add_argument("--slide", type=int, default=0, help="Scene to open on (0-4)")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config).validate()
        dataset = load_csv(args.data)
    except (OSError, StoryError) as e:
        logger.error("%s", e)
        return 1

    if args.export is not None:
        from life_story.snapshot import export_scenes

        for path in export_scenes(dataset, config, args.export):
            print(path)
        return 0

    from life_story.ui_window import StoryWindow

    app = StoryWindow(dataset, config, start_slide=args.slide)
    app.mainloop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
