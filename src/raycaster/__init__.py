"""Taichi-based recursive ray caster.

This package renders spheres over an infinite checkerboard ground plane,
lit by a single directional sun, with mirror reflections followed up to a
fixed depth. Every pixel is traced independently in a parallel Taichi
kernel and the frame comes back as an 8-bit RGB NumPy array.

Subpackages:
    core: Vector utilities, the shading pipeline and the render loop
    geometry: Sphere primitive and its intersection test
    materials: Color and reflectivity material model with a named palette
    scene: Scene query, scene manager and the showcase scene
    camera: Yaw-only projector turning pixels into rays
    preview: PNG export, Matplotlib preview and the interactive window
"""

__version__ = "0.1.0"
