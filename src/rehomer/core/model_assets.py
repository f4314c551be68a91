"""Asset loading for model scripts: everything loaded is registered as a dependency."""

import logging
from typing import Union

from ..graph import ModelInfo, discover
from ..keys import MaterialKey, ModelKey, TextureKey
from ..scene import Material, Spatial, Texture
from ..scene.material import SmartAsset
from .asset_reader import AssetReader

logger = logging.getLogger(__name__)


class ModelAssets:
    """
    Wraps an AssetReader for one ModelInfo.

    A script that pulls a texture or material into the model this way gets it
    copied and rehomed along with everything discovered at load time.
    """

    def __init__(self, model: ModelInfo, reader: AssetReader):
        self.model = model
        self.reader = reader

    def _add_dependency(self, asset):
        if isinstance(asset, (SmartAsset, Spatial)):
            self.model.add_dependency(asset)
        return asset

    def load_texture(self, key: Union[str, TextureKey], flip_y: bool = False) -> Texture:
        if isinstance(key, str):
            key = TextureKey.parse(key, flip_y=flip_y)
        return self._add_dependency(self.reader.load_texture(key))

    def load_material(self, key: Union[str, MaterialKey]) -> Material:
        """Load a material file. Its keyed textures become dependencies too."""
        if isinstance(key, str):
            key = MaterialKey.parse(key)
        material = self._add_dependency(self.reader.load_material(key))
        for texture in material.textures():
            if texture.key is not None:
                self.model.add_dependency(texture)
        return material

    def load_model(self, key: Union[str, ModelKey]) -> Spatial:
        """
        Load another model by key.

        The model file itself is a dependency. Its materials and textures are
        discovered into this model's dependency map as well.
        """
        if isinstance(key, str):
            key = ModelKey.parse(key)
        model = self._add_dependency(self.reader.load_model_key(key))
        discover(model, dependencies=self.model.dependencies)
        return model
