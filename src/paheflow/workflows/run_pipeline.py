import argparse
import logging
import re
import sys
from typing import Optional

from tqdm import tqdm

from paheflow import config
from paheflow.providers.base import EpisodeInfo, RunOutput, SeriesInfo
from paheflow.providers.errors import PaheError
from paheflow.providers.pagination import EpisodeRange, parse_episode_range
from paheflow.providers.runner import ProviderEngine
from paheflow.providers.sources.animepahe import is_episode_url, is_series_url

log = logging.getLogger("paheflow.pipeline")

_FILENAME_RE = re.compile(r"[a-zA-Z0-9_\-\.]+\.\S*")

# --- VALIDATION ---

def is_valid_export_filename(filename: str) -> bool:
    """Bare file names only (no path separators), e.g. 'links.txt'."""
    if "/" in filename or "\\" in filename:
        return False
    return bool(_FILENAME_RE.fullmatch(filename))

def describe_quality(target_resolution: int) -> str:
    if target_resolution == 0:
        return "Max Available"
    if target_resolution == -1:
        return "Lowest Available"
    return f"{target_resolution}p"

# --- TASKS ---

def task_fetch_metadata(engine: ProviderEngine, link: str):
    print("Requesting Info...")
    info = engine.metadata(link)
    if isinstance(info, SeriesInfo):
        print(f"  Anime: {info.title}")
        print(f"  Type: {info.kind}")
        print(f"  Episodes: {info.episodes}")
    else:
        print(f"  Anime: {info.title}")
        print(f"  Episode: {info.episode}")
    return info

def task_collect_pages(engine: ProviderEngine, link: str, episode_range: Optional[EpisodeRange]) -> list[str]:
    pages = engine.episode_pages(link, episode_range)
    print(f"Requesting Episodes : {len(pages)} OK!")
    return pages

def task_resolve_links(engine: ProviderEngine, pages: list[str], first_number: int, target_resolution: int) -> list[RunOutput]:
    results = []
    for offset, page in enumerate(tqdm(pages, desc="Processing", unit="ep")):
        results.append(engine.run_episode(first_number + offset, page, target_resolution))
    for out in results:
        status = "OK!" if out.ok else f"FAIL! ({out.error})"
        print(f"  EP{out.episode_number:02d} : {status}")
    return results

def task_export_links(results: list[RunOutput], filename: str) -> int:
    links = [out.direct_link for out in results if out.ok]
    with open(filename, "w", encoding="utf-8") as fh:
        for link in links:
            fh.write(link + "\n")
    print(f"Exported : {filename}")
    return len(links)

# --- THE FLOW ---

def main_flow(link: str, episodes: str = "all", quality: int = 0, export: bool = False,
              filename: str = config.EXPORT_FILENAME, attempts: int = config.KWIK_MAX_ATTEMPTS,
              engine: Optional[ProviderEngine] = None) -> list[RunOutput]:
    """
    Resolves every requested episode of an animepahe link to a direct download link.
    1. Show series / episode info
    2. Collect play pages for the episode range
    3. Select a download entry and resolve it, episode by episode
    4. Optionally export the links
    """
    series = is_series_url(link)
    episode_range = parse_episode_range(episodes) if series else None

    print(f"targetResolution: {describe_quality(quality)}")
    print(f"exportLinks: {export}" + (f" [{filename}]" if export else ""))
    if series:
        print(f"episodesRange: {episode_range or 'All'}")

    own_engine = engine is None
    engine = engine or ProviderEngine(max_attempts=attempts)
    try:
        info = task_fetch_metadata(engine, link)
        pages = task_collect_pages(engine, link, episode_range)

        if episode_range is not None:
            first = episode_range.start
        elif isinstance(info, EpisodeInfo) and info.episode.isdigit():
            first = int(info.episode)
        else:
            first = 1
        results = task_resolve_links(engine, pages, first, quality)
    finally:
        if own_engine:
            engine.close()

    if export:
        task_export_links(results, filename)
    return results

def parse_args(argv=None):
    parser = argparse.ArgumentParser(prog="paheflow", description="AnimePahe direct link extractor")
    parser.add_argument("-l", "--link", required=True, help="Anime series link or a single episode link")
    parser.add_argument("-e", "--episodes", default="all", help="Episodes to extract (all, 1-15)")
    parser.add_argument("-q", "--quality", type=int, default=0, help="Target quality: 0 max, -1 min, or a height like 720")
    parser.add_argument("-x", "--export", action="store_true", help="Export download links to a text file")
    parser.add_argument("-f", "--filename", default=config.EXPORT_FILENAME, help="Custom filename for the exported file")
    parser.add_argument("-a", "--attempts", type=int, default=config.KWIK_MAX_ATTEMPTS, help="Kwik extraction attempts per episode")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log scraper progress")
    args = parser.parse_args(argv)

    if not is_series_url(args.link) and not is_episode_url(args.link):
        parser.error("Invalid link format. Please provide a valid AnimePahe series or episode link.")
    if args.episodes != "all":
        try:
            parse_episode_range(args.episodes)
        except ValueError as e:
            parser.error(str(e))
    if not is_valid_export_filename(args.filename):
        parser.error(f"{args.filename} is not valid for -f,--filename [filename]")
    if args.quality < -1:
        parser.error(f"{args.quality} is not valid for -q,--quality [0-max,-1-min,720|360]")
    if args.attempts < 1:
        parser.error("-a,--attempts must be at least 1")
    return args

def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else config.LOG_LEVEL,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )
    try:
        main_flow(
            link=args.link,
            episodes=args.episodes,
            quality=args.quality,
            export=args.export,
            filename=args.filename,
            attempts=args.attempts,
        )
    except (PaheError, OSError) as e:
        print(f"\n * ERROR : {e}\n", file=sys.stderr)
        return 1
    return 0

if __name__ == "__main__":
    sys.exit(main())
