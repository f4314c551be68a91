"""
File formats read and written by the converter.

Modules:
  - gltf: glTF 2.0 reader (.gltf, .glb)
  - scene: native scene (.scene) and material (.mat) files
"""
