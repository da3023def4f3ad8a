"""
Space registry.

Static lookup from chain spaces to the wallet providers valid within each.
The session manager uses it to validate every space and provider selection.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from ..providers.base import ProviderDescriptor
from ..providers.variants import WalletVariant, conflux_variants
from .errors import InvalidProvider, UnknownSpace
from .spaces import CORE_SPACE, ESPACE_SPACE, AddressFormat, Space


CORE = Space(
    name=CORE_SPACE,
    label="Conflux Core",
    native_symbol="CFX",
    address_format=AddressFormat.BASE32,
)

ESPACE = Space(
    name=ESPACE_SPACE,
    label="Conflux eSpace",
    native_symbol="CFX",
    address_format=AddressFormat.HEX,
)


class SpaceRegistry:
    """
    Ordered, read-only mapping of spaces to wallet variants.

    Usage:
        registry = build_default_registry()
        registry.list_spaces()                # [core, espace]
        registry.list_providers("espace")     # [MetaMask@espace, Fluent@espace]
    """

    def __init__(self, entries: Iterable[Tuple[Space, Sequence[WalletVariant]]]):
        self._spaces: Dict[str, Space] = {}
        self._variants: Dict[str, Tuple[WalletVariant, ...]] = {}

        for space, variants in entries:
            if space.name in self._spaces:
                raise ValueError(f"Space {space.name!r} registered twice")

            names = set()
            for variant in variants:
                if variant.space != space.name:
                    raise ValueError(
                        f"Provider {variant.name!r} belongs to space {variant.space!r}, "
                        f"not {space.name!r}"
                    )
                if variant.name in names:
                    raise ValueError(f"Provider {variant.name!r} registered twice in {space.name!r}")
                names.add(variant.name)

            self._spaces[space.name] = space
            self._variants[space.name] = tuple(variants)

    @staticmethod
    def _space_name(space: Union[str, Space]) -> str:
        return space.name if isinstance(space, Space) else space

    def has_space(self, space: Union[str, Space]) -> bool:
        return self._space_name(space) in self._spaces

    def list_spaces(self) -> List[Space]:
        return list(self._spaces.values())

    def get_space(self, space: Union[str, Space]) -> Space:
        name = self._space_name(space)
        try:
            return self._spaces[name]
        except KeyError:
            raise UnknownSpace(
                f"Unknown space {name!r}. Expected one of {list(self._spaces)}"
            ) from None

    def list_providers(self, space: Union[str, Space]) -> List[ProviderDescriptor]:
        name = self.get_space(space).name
        return [variant.descriptor for variant in self._variants[name]]

    def get_variant(self, space: Union[str, Space], provider_name: str) -> WalletVariant:
        name = self.get_space(space).name
        for variant in self._variants[name]:
            if variant.name == provider_name:
                return variant

        valid = [variant.name for variant in self._variants[name]]
        raise InvalidProvider(
            f"Provider {provider_name!r} is not available in space {name!r}. Expected one of {valid}"
        )


def build_default_registry(network: Optional[str] = None) -> SpaceRegistry:
    """Registry of the Conflux Core and eSpace wallets for a network."""
    if network is None:
        from ..config import settings

        network = settings.network

    variants = conflux_variants(network)
    return SpaceRegistry(
        [
            (CORE, [v for v in variants if v.space == CORE.name]),
            (ESPACE, [v for v in variants if v.space == ESPACE.name]),
        ]
    )


__all__ = [
    "CORE",
    "ESPACE",
    "SpaceRegistry",
    "build_default_registry",
]
