import logging
import os
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .errors import MeshLoadError, TextureLoadError
from .geometry import Vec2, Vec3
from .texture import CLAMP, Texture

logger = logging.getLogger(__name__)

# Texture maps stored next to an OBJ file: <stem><suffix>
MAP_SUFFIXES = {
    "diffuse": "_diffuse.tga",
    "normal": "_nm.tga",
    "specular": "_spec.tga",
}


# ============================================================
#  OBJ loader
# ============================================================

@dataclass
class Face:
    """
    Single triangle face, indices into:
      - v:  vertex positions
      - vt: texture coords
      - vn: vertex normals

    Indices are 0-based (we subtract 1 when parsing OBJ); -1 marks a slot
    the face line left empty.
    """
    v: Tuple[int, int, int]
    vt: Tuple[int, int, int]
    vn: Tuple[int, int, int]


class Mesh:
    """
    Minimal OBJ parser for triangular meshes, plus its texture maps.

    Supported:
      v  x y z
      vt u v [w]
      vn x y z
      f  v/vt/vn v/vt/vn v/vt/vn  (triangles only; v, v/vt and v//vn too)

    Anything else (o, g, s, usemtl, ...) is ignored. A face that is not a
    triangle, an unparsable number, or an index outside the loaded arrays
    raises MeshLoadError.
    """
    def __init__(self, path: str, policy: str = CLAMP):
        self.path = str(path)
        self.policy = policy
        self.verts: List[Vec3] = []
        self.uvs: List[Vec2] = []
        self.normals: List[Vec3] = []
        self.faces: List[Face] = []
        self.maps: Dict[str, Texture] = {}
        self._load(self.path)

    @classmethod
    def load(cls, path: str, maps: Tuple[str, ...] = (), policy: str = CLAMP) -> "Mesh":
        """Parse the OBJ at `path` and load the named texture maps."""
        mesh = cls(path, policy=policy)
        for kind in maps:
            mesh.load_texture(kind)
        return mesh

    def _load(self, path: str):
        """Read OBJ file and populate verts/uvs/normals/faces."""
        try:
            with open(path, "r", encoding="utf-8", errors="ignore") as f:
                for lineno, line in enumerate(f, 1):
                    line = line.strip()
                    if not line or line.startswith("#"):
                        continue
                    try:
                        self._parse_line(line.split())
                    except (ValueError, IndexError) as e:
                        raise MeshLoadError(f"{path}:{lineno}: malformed line {line!r}: {e}") from e
        except OSError as e:
            raise MeshLoadError(f"cannot read mesh {path}: {e}") from e
        self._check_indices()
        logger.info("Loaded mesh %s: %d verts, %d faces, %d uvs, %d normals",
                    path, len(self.verts), len(self.faces), len(self.uvs), len(self.normals))

    def _parse_line(self, parts: List[str]):
        if parts[0] == "v":
            self.verts.append(Vec3(float(parts[1]), float(parts[2]), float(parts[3])))
        elif parts[0] == "vt":
            self.uvs.append(Vec2(float(parts[1]), float(parts[2])))
        elif parts[0] == "vn":
            self.normals.append(Vec3(float(parts[1]), float(parts[2]), float(parts[3])))
        elif parts[0] == "f":
            if len(parts) != 4:
                raise ValueError(f"face has {len(parts) - 1} vertices, expected 3")
            v_idx, vt_idx, vn_idx = [], [], []
            for i in range(1, 4):
                comps = parts[i].split("/")
                vi = int(comps[0]) - 1
                vti = int(comps[1]) - 1 if len(comps) > 1 and comps[1] else -1
                vni = int(comps[2]) - 1 if len(comps) > 2 and comps[2] else -1
                v_idx.append(vi); vt_idx.append(vti); vn_idx.append(vni)
            self.faces.append(Face(tuple(v_idx), tuple(vt_idx), tuple(vn_idx)))

    def _check_indices(self):
        for n, face in enumerate(self.faces):
            for idx, pool, what in ((face.v, self.verts, "vertex"),
                                    (face.vt, self.uvs, "uv"),
                                    (face.vn, self.normals, "normal")):
                for i in idx:
                    if i >= len(pool) or (i < 0 and (what == "vertex" or i != -1)):
                        raise MeshLoadError(
                            f"{self.path}: face {n} references {what} {i + 1}, "
                            f"only {len(pool)} defined")

    # ---------------------------------------------------
    #  Per-face accessors
    # ---------------------------------------------------
    def nfaces(self) -> int:
        return len(self.faces)

    def nverts(self) -> int:
        return len(self.verts)

    def vert(self, iface: int, nthvert: int) -> Vec3:
        return self.verts[self.faces[iface].v[nthvert]]

    def uv(self, iface: int, nthvert: int) -> Vec2:
        """UV of a face corner, or (0,0) if the face has none."""
        idx = self.faces[iface].vt[nthvert]
        if idx < 0:
            return Vec2(0.0, 0.0)
        return self.uvs[idx]

    def normal(self, iface: int, nthvert: int) -> Vec3:
        """Normalized normal of a face corner, or (0,0,1) if the face has none."""
        idx = self.faces[iface].vn[nthvert]
        if idx < 0:
            return Vec3(0.0, 0.0, 1.0)
        return self.normals[idx].normalize()

    # ---------------------------------------------------
    #  Texture maps
    # ---------------------------------------------------
    def map_path(self, kind: str) -> str:
        if kind not in MAP_SUFFIXES:
            raise TextureLoadError(f"unknown texture map kind {kind!r}")
        stem, _ = os.path.splitext(self.path)
        return stem + MAP_SUFFIXES[kind]

    def load_texture(self, kind: str, path: Optional[str] = None) -> Texture:
        """Load one of the diffuse / normal / specular maps (flipped vertically)."""
        path = path or self.map_path(kind)
        tex = Texture.open(path, flip=True, policy=self.policy)
        self.maps[kind] = tex
        return tex

    def _map(self, kind: str) -> Texture:
        tex = self.maps.get(kind)
        if tex is None:
            raise TextureLoadError(f"{self.path}: {kind} map not loaded")
        return tex

    def diffuse(self, uv: Vec2) -> Tuple[int, int, int, int]:
        return self._map("diffuse").sample(uv.x, uv.y)

    def normal_map(self, uv: Vec2) -> Vec3:
        """Normal encoded in the normal map: each channel c/255 * 2 - 1."""
        c = self._map("normal").sample(uv.x, uv.y)
        return Vec3(c[0] / 255.0 * 2.0 - 1.0,
                    c[1] / 255.0 * 2.0 - 1.0,
                    c[2] / 255.0 * 2.0 - 1.0)

    def specular(self, uv: Vec2) -> float:
        """Specular exponent: first channel of the specular map."""
        return float(self._map("specular").sample(uv.x, uv.y)[0])
