import numpy as np

from meshsmith import MeshStore, MeshStoreConfig

# store with the built-in catalog
store = MeshStore(MeshStoreConfig.from_env())

for name in store.names():
    center, lo, hi = store.mesh_aabb(name)
    print(f"{name:16s} verts={store.get(name).vertex_count:5d} size={np.round(hi - lo, 4)}")

# ask for a new primitive, then ask again with other parameters (first one wins)
a = store.create_tube("half_ring", 0.8, 1.0, 0.2, rings=2, segments=32, arc=np.pi)
b = store.create_tube("half_ring", 0.1, 0.2, 0.2, rings=1, segments=8)
print("same mesh:", a is b, "indices:", a.index_count)

# flat buffers for upload
verts, inds = a.fill_arrays()
print("buffers:", verts.shape, verts.dtype, inds.shape, inds.dtype)
