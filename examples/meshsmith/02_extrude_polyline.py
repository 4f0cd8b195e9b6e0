from meshsmith import MeshStore, MeshStoreConfig
from meshsmith.gen.triangulate import triangulation_available

if not triangulation_available():
    raise SystemExit("install shapely + mapbox-earcut to run this example")

store = MeshStore(MeshStoreConfig(create_builtins=False))

# L-shaped outline, closed implicitly
outline = [(0, 0), (2, 0), (2, 1), (1, 1), (1, 2), (0, 2)]
mesh = store.create_extruded_polyline("bracket", [outline], height=0.5)

sub = mesh.submesh(0)
lo, hi = mesh.bounds()
print("vertices:", sub.vertex_count, "triangles:", sub.index_count // 3)
print("bounds:", lo, hi)

# export through trimesh
tm = mesh.to_trimesh(process=True)
print("watertight:", tm.is_watertight, "volume:", round(float(tm.volume), 6))
