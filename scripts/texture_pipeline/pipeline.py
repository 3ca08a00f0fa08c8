"""
Map set generation and I/O coordination.

Runs the full chain for one image:

    source → (optional) seamless tiling → color correction
           → height / normal / roughness / AO / metalness (in parallel)
           → curvature (waits on the normal map)

and handles writing map sets to disk and batch processing of many images.
"""

from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterator, Optional, Sequence, Union

from tqdm import tqdm

from .color_correction import apply_color_correction
from .config import MAP_NAMES, MapOptions, OutputConfig, PipelineConfig
from .normals import generate_curvature_map, generate_normal_map
from .pixel_buffer import PixelBuffer
from .surface_maps import (
    generate_ao_map,
    generate_height_map,
    generate_metalness_map,
    generate_roughness_map,
)
from .tiling import process


@dataclass
class MapSet:
    """One PBR map set; every map has the source's dimensions."""

    base: PixelBuffer
    height: PixelBuffer
    normal: PixelBuffer
    roughness: PixelBuffer
    ao: PixelBuffer
    metalness: PixelBuffer
    curvature: PixelBuffer

    def __iter__(self) -> Iterator[tuple[str, PixelBuffer]]:
        for name in MAP_NAMES:
            yield name, getattr(self, name)

    def __getitem__(self, name: str) -> PixelBuffer:
        if name not in MAP_NAMES:
            raise KeyError(f"Unknown map '{name}'. Available: {', '.join(MAP_NAMES)}")
        return getattr(self, name)

    @property
    def size(self) -> tuple[int, int]:
        return self.base.size


def prepare_source(
    source: PixelBuffer,
    options: MapOptions,
    seamless: bool = False,
) -> PixelBuffer:
    """Tiling (if requested) followed by color correction."""
    if seamless:
        source = process(
            source,
            options.tiling_algorithm,
            options.tiling_blend,
            options.tiling_curve,
        )
    return apply_color_correction(source, options)


def generate_maps(
    source: PixelBuffer,
    options: Optional[MapOptions] = None,
    seamless: bool = False,
    workers: int = 4,
) -> MapSet:
    """Generate the full map set for one image.

    The five generators that only need the corrected image run
    concurrently; curvature is chained onto the normal map task.

    Args:
        source: Decoded source image
        options: Map options (defaults if None)
        seamless: Make the source tileable before anything else
        workers: Thread pool size (1 runs everything inline)

    Returns:
        MapSet with the corrected base and all six maps
    """
    options = options or MapOptions()
    base = prepare_source(source, options, seamless)

    tasks: dict[str, tuple[Callable[..., PixelBuffer], tuple]] = {
        "height": (generate_height_map, (base, options.contrast, options.blur)),
        "normal": (generate_normal_map, (base, options.intensity)),
        "roughness": (generate_roughness_map, (base, options.invert)),
        "ao": (generate_ao_map, (base, options.intensity, options.ao_multiplier)),
        "metalness": (
            generate_metalness_map,
            (base, options.is_metallic, options.metalness_base),
        ),
    }

    if workers <= 1:
        maps = {name: func(*args) for name, (func, args) in tasks.items()}
        maps["curvature"] = generate_curvature_map(maps["normal"], reference=base)
        return MapSet(base=base, **maps)

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures: dict[str, Future] = {
            name: executor.submit(func, *args) for name, (func, args) in tasks.items()
        }
        normal_future = futures["normal"]
        futures["curvature"] = executor.submit(
            lambda: generate_curvature_map(normal_future.result(), reference=base)
        )
        maps = {name: future.result() for name, future in futures.items()}

    return MapSet(base=base, **maps)


def save_map_set(
    map_set: MapSet,
    output: Optional[OutputConfig] = None,
    output_dir: Optional[Path] = None,
) -> dict[str, Path]:
    """Write selected maps as '{prefix}_{map}.{format}'.

    Args:
        map_set: Generated maps
        output: Output settings (defaults if None)
        output_dir: Overrides output.output_dir

    Returns:
        Mapping of map name to written path
    """
    output = output or OutputConfig()
    output_dir = Path(output_dir or output.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    paths = {}
    for name in output.maps:
        paths[name] = map_set[name].save(output_dir / output.filename(name))
    return paths


def process_file(
    path: Union[str, Path],
    config: Optional[PipelineConfig] = None,
) -> dict[str, Path]:
    """Load an image, generate its maps and save them.

    The file prefix defaults to the image's stem when the config's prefix
    is empty.
    """
    config = config or PipelineConfig()
    path = Path(path)

    source = PixelBuffer.load(path)
    maps = generate_maps(
        source,
        config.options,
        seamless=config.seamless,
        workers=config.workers,
    )

    output = config.output
    if not output.prefix:
        output = OutputConfig(
            output_dir=output.output_dir,
            prefix=path.stem,
            format=output.format,
            maps=output.maps,
        )
    return save_map_set(maps, output)


def generate_batch(
    paths: Sequence[Union[str, Path]],
    config: Optional[PipelineConfig] = None,
    workers: Optional[int] = None,
    progress: bool = True,
) -> dict[Path, dict[str, Path]]:
    """Generate map sets for many images using parallel workers.

    Each image is written to its own subdirectory named after its stem.
    A failing image is reported and skipped; the rest of the batch still
    runs.

    Args:
        paths: Source image paths
        config: Pipeline configuration
        workers: Number of images processed at once (config default if None)
        progress: Show progress bar

    Returns:
        Mapping of source path to its written maps
    """
    config = config or PipelineConfig()
    workers = workers or config.workers

    def run(path: Path) -> dict[str, Path]:
        output = OutputConfig(
            output_dir=Path(config.output.output_dir) / path.stem,
            prefix=config.output.prefix or path.stem,
            format=config.output.format,
            maps=config.output.maps,
        )
        # Images already run in parallel; keep each map set inline
        per_image = PipelineConfig(
            options=config.options,
            output=output,
            seamless=config.seamless,
            workers=1,
        )
        return process_file(path, per_image)

    results: dict[Path, dict[str, Path]] = {}
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {executor.submit(run, Path(p)): Path(p) for p in paths}

        iterator = tqdm(
            as_completed(futures),
            total=len(futures),
            desc="Generating maps",
            disable=not progress,
        )

        for future in iterator:
            path = futures[future]
            try:
                results[path] = future.result()
            except (OSError, ValueError) as e:
                print(f"Error processing {path}: {e}")

    return results


