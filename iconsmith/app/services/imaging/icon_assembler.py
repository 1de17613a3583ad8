import logging
import os
from typing import Callable, Iterable, List, Optional, Sequence

from iconsmith.app.services.imaging.ico_encoder import encode_ico
from iconsmith.app.services.imaging.image_models import (
    FaviconArtifact,
    PlaneOutput,
    PlaneSpec,
    RawPlane,
    SourceImage,
)
from iconsmith.app.services.imaging.plane_renderer import PlaneRenderer
from iconsmith.app.utils.task_fanout import SchedulingPolicy, run_all

logger = logging.getLogger(__name__)

DEFAULT_CONTAINER_EXTENSIONS = (".ico",)


def raw_plane_name(spec: PlaneSpec) -> str:
    return f"{spec.width}x{spec.height}.rawdata"


class IconAssembler:
    """Produces one named artifact from a list of plane specs.

    A container is written when the artifact name ends in a container extension
    (compared case-sensitively, so "FAVICON.ICO" is not one by default) or
    when anything other than exactly one plane is requested; a single plane with
    any other extension is emitted directly as a PNG.
    """

    def __init__(
        self,
        renderer: PlaneRenderer,
        policy: SchedulingPolicy = SchedulingPolicy.CONCURRENT,
        container_extensions: Iterable[str] = DEFAULT_CONTAINER_EXTENSIONS,
        encoder: Callable[[Sequence[RawPlane]], bytes] = encode_ico,
    ) -> None:
        self.renderer = renderer
        self.policy = policy
        self.container_extensions = set(container_extensions)
        self.encoder = encoder

    def is_container_requested(self, name: str, specs: Sequence[PlaneSpec]) -> bool:
        return os.path.splitext(name)[1] in self.container_extensions or len(specs) != 1

    async def assemble(
        self, sources: Sequence[SourceImage], name: str, specs: Sequence[PlaneSpec], container: Optional[bool] = None
    ) -> FaviconArtifact:
        """Render the planes of one artifact and pack them when needed.

        Args:
            sources: Decoded source images shared by every plane.
            name: Artifact file name, extension included.
            specs: Plane specs in output order.
            container: Force or suppress container output; derived from name and specs when None.

        Returns:
            FaviconArtifact holding PNG or ICO bytes.
        """
        if container is None:
            container = self.is_container_requested(name, specs)

        if container:
            planes: List[RawPlane] = await run_all(
                [
                    lambda spec=spec: self.renderer.render(sources, spec, raw_plane_name(spec), PlaneOutput.RAW)
                    for spec in specs
                ],
                self.policy,
            )
            contents = self.encoder(planes)
            logger.debug(f"Assembled container {name} with {len(planes)} planes")
            return FaviconArtifact(name=name, contents=contents)

        plane = await self.renderer.render(sources, specs[0], name, PlaneOutput.ENCODED)
        logger.debug(f"Assembled single image {name} ({plane.width}x{plane.height})")
        return FaviconArtifact(name=name, contents=plane.data)
