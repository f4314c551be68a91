"""Materials, material parameters and textures."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..keys import MaterialKey, ResourceKey, TextureKey


class SmartAsset:
    """
    An asset object whose identity is tied to a key.

    The key is the only location data an asset carries. Dependency records
    rewrite it in place when the asset is rehomed.
    """

    def __init__(self, key: Optional[ResourceKey] = None):
        self._key = key

    @property
    def key(self) -> Optional[ResourceKey]:
        return self._key

    @key.setter
    def key(self, value: Optional[ResourceKey]):
        self._key = value


class Texture(SmartAsset):
    """A texture reference. Embedded textures carry raw image bytes and no key."""

    def __init__(self, key: Optional[TextureKey] = None, image_data: Optional[bytes] = None,
                 mime_type: Optional[str] = None, name: Optional[str] = None):
        super().__init__(key)
        self.image_data = image_data
        self.mime_type = mime_type
        self.name = name

    @property
    def is_embedded(self) -> bool:
        return self.image_data is not None

    def __repr__(self) -> str:
        if self.key is not None:
            return f"Texture({self.key})"
        return f"Texture(embedded, {len(self.image_data or b'')} bytes)"


# Parameter types, loosely following common shader uniform naming
PARAM_FLOAT = "Float"
PARAM_INT = "Int"
PARAM_BOOLEAN = "Boolean"
PARAM_VECTOR2 = "Vector2"
PARAM_VECTOR3 = "Vector3"
PARAM_VECTOR4 = "Vector4"
PARAM_COLOR = "Color"
PARAM_TEXTURE2D = "Texture2D"


@dataclass
class MatParam:
    """A named material parameter. Texture parameters hold a Texture value."""
    name: str
    type: str
    value: Any

    @property
    def is_texture(self) -> bool:
        return isinstance(self.value, Texture)

    def __repr__(self) -> str:
        return f"MatParam({self.type} {self.name}: {self.value!r})"


class Material(SmartAsset):
    """
    A material: a definition name plus ordered parameters.

    Materials read from a material file carry a MaterialKey. Materials
    embedded in a model file have no key.
    """

    def __init__(self, definition: str, name: Optional[str] = None,
                 key: Optional[MaterialKey] = None):
        super().__init__(key)
        self.definition = definition
        self.name = name
        self._params: Dict[str, MatParam] = {}

    def set_param(self, name: str, param_type: str, value: Any) -> MatParam:
        param = MatParam(name, param_type, value)
        self._params[name] = param
        return param

    def set_texture(self, name: str, texture: Texture) -> MatParam:
        return self.set_param(name, PARAM_TEXTURE2D, texture)

    def get_param(self, name: str) -> Optional[MatParam]:
        return self._params.get(name)

    def clear_param(self, name: str) -> None:
        self._params.pop(name, None)

    @property
    def params(self) -> List[MatParam]:
        return list(self._params.values())

    def textures(self) -> List[Texture]:
        return [p.value for p in self._params.values() if p.is_texture]

    def __repr__(self) -> str:
        label = self.name or self.definition
        return f"Material({label})"
