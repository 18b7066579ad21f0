"""Progressive Monte Carlo path tracer built on Taichi.

This package renders scenes of spheres and checkerboard ground planes with
diffuse, metal, glass and emissive materials through a thin-lens camera, and
refines the image forever by averaging an unbounded stream of samples.

Subpackages:
    core: Vector math, color model, integrator, progressive loop and worker
    geometry: Hit records, spheres, planes and bounding boxes
    materials: Lambertian, metal, dielectric and light scattering
    scene: Closest-hit queries, scene manager and the demo scene
    camera: Thin-lens camera
    preview: Matplotlib live display and PNG export
"""

__version__ = "0.1.0"
