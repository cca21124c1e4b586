from geoindex.algorithms import kd_tree
from geoindex.algorithms.naive import NaiveIndex
from geoindex.data_models import Coordinate, Record

records = [
    Record(osm_id=1, name="Copenhagen", lon=12.568, lat=55.676),
    Record(osm_id=2, name="Aarhus", lon=10.203, lat=56.162),
    Record(osm_id=3, name="Odense", lon=10.388, lat=55.403),
    Record(osm_id=4, name="Aalborg", lon=9.921, lat=57.048),
]
naive = NaiveIndex.build(list(records))
index = kd_tree.build_index(records)
assert index is not None and naive is not None

for line in index.tree.format_tree():
    print(line)

nearest = kd_tree.find_nearest(index, 10.4, 55.5)
assert nearest is not None
assert nearest is naive.lookup(Coordinate(10.4, 55.5))
print(nearest.name)

kd_tree.destroy_index(index)
assert kd_tree.find_nearest(index, 10.4, 55.5) is None
