import logging
from typing import Dict, List, Optional, Sequence, Union

from iconsmith.app.config.app_config import GlobalIconConfig, load_app_config
from iconsmith.app.config.logging_config import setup_logging
from iconsmith.app.services.imaging.icon_assembler import IconAssembler
from iconsmith.app.services.imaging.image_engine import CairoSvgRasterizer, Compositor, Rasterizer
from iconsmith.app.services.imaging.image_models import (
    FaviconArtifact,
    IconOptions,
    SourceImage,
    flatten_icon_options,
)
from iconsmith.app.services.imaging.plane_renderer import PlaneRenderer
from iconsmith.app.services.imaging.source_loader import SourceInput, SourceLoader
from iconsmith.app.utils.task_fanout import SchedulingPolicy, resolve_scheduling_policy, run_all

logger = logging.getLogger(__name__)


class FaviconGenerationService:
    """Entry point turning source images and per-artifact icon options into finished icons.

    Loads the source set once per request, then assembles every requested artifact
    through the fan-out coordinator so results come back in request order.
    Artifacts whose options are marked maskable are rendered from a separate
    maskable source set when one is supplied.

    Attributes:
        config: Global icon configuration.
        policy: Scheduling policy used for every fan-out.
        loader: Source loader.
        renderer: Plane renderer owning the engine thread pool.
        assembler: Per-artifact assembler.
    """

    def __init__(
        self,
        config: Optional[GlobalIconConfig] = None,
        rasterizer: Optional[Rasterizer] = None,
        compositor: Optional[Compositor] = None,
        policy: Optional[SchedulingPolicy] = None,
    ) -> None:
        self.config = config or GlobalIconConfig()
        self.policy = policy or resolve_scheduling_policy(self.config.scheduling.policy)

        rasterizer = rasterizer or CairoSvgRasterizer()
        self.loader = SourceLoader(rasterizer=rasterizer, policy=self.policy)
        self.renderer = PlaneRenderer(config=self.config.rendering, rasterizer=rasterizer, compositor=compositor)
        self.assembler = IconAssembler(
            renderer=self.renderer,
            policy=self.policy,
            container_extensions=self.config.rendering.container_extensions,
        )

        logger.debug(f"FaviconGenerationService initialized with {self.policy.value} scheduling")

    @classmethod
    def from_config_file(
        cls,
        config_path: Optional[str] = None,
        rasterizer: Optional[Rasterizer] = None,
        compositor: Optional[Compositor] = None,
    ) -> "FaviconGenerationService":
        """Load the YAML config, apply its logging section and build the service.

        Args:
            config_path: Path to the YAML settings file; defaults apply when None or missing.
            rasterizer: Optional rasterizer override.
            compositor: Optional compositor override.

        Returns:
            A service configured from the file.
        """
        config = load_app_config(config_path)
        setup_logging(config=config.logging)
        return cls(config=config, rasterizer=rasterizer, compositor=compositor)

    async def load_sources(self, source: SourceInput) -> List[SourceImage]:
        return await self.loader.load_sources(source)

    async def create_favicon(self, sourceset: Sequence[SourceImage], name: str, options: IconOptions) -> FaviconArtifact:
        return await self.assembler.assemble(sourceset, name, flatten_icon_options(options))

    async def generate(
        self,
        source: SourceInput,
        icons: Dict[str, IconOptions],
        maskable_source: Union[SourceInput, bool, None] = None,
    ) -> List[FaviconArtifact]:
        """Generate every requested icon artifact.

        Args:
            source: Buffer, path, or flat list of buffers and paths for the main source set.
            icons: Artifact name to icon options, in output order.
            maskable_source: Source set for maskable artifacts; True reuses the main set,
                None or False renders maskable artifacts from the main set as well.

        Returns:
            One FaviconArtifact per entry of icons, in the same order.
        """
        sourceset = await self.load_sources(source)

        maskable_set = sourceset
        if maskable_source is not None and not isinstance(maskable_source, bool):
            maskable_set = await self.load_sources(maskable_source)

        def sources_for(options: IconOptions) -> Sequence[SourceImage]:
            return maskable_set if options.purpose == "maskable" else sourceset

        logger.info(f"Generating {len(icons)} icon artifacts from {len(sourceset)} sources")
        return await run_all(
            [
                lambda name=name, options=options: self.create_favicon(sources_for(options), name, options)
                for name, options in icons.items()
            ],
            self.policy,
        )

    def shutdown(self) -> None:
        self.renderer.shutdown()
        logger.info("FaviconGenerationService shutdown complete")
