import os
import shutil
import tempfile
import unittest

from catalog.bootstrap import PXF_PROTOCOLS, bootstrap_catalog, wrapper_name
from catalog.system_catalog import ForeignCatalog
from options.levels import ExecLocation

class TestBootstrap(unittest.TestCase):
    def setUp(self):
        self.test_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.test_dir)

    def test_fresh_bootstrap(self):
        """Bootstrapping an empty directory installs every standard wrapper."""
        catalog = bootstrap_catalog(self.test_dir)

        self.assertTrue(os.path.exists(os.path.join(self.test_dir, "foreign_catalog.json")))
        self.assertEqual(len(catalog.list_wrappers()), len(PXF_PROTOCOLS))

        s3 = catalog.get_wrapper_by_name("s3_pxf_fdw")
        self.assertIsNotNone(s3)
        self.assertEqual(s3.options, [("protocol", "s3")])
        self.assertEqual(s3.exec_location, ExecLocation.ALL_SEGMENTS)

    def test_bootstrap_is_idempotent(self):
        first = bootstrap_catalog(self.test_dir)
        oids = sorted(w.oid for w in first.list_wrappers())

        second = bootstrap_catalog(self.test_dir)
        self.assertEqual(sorted(w.oid for w in second.list_wrappers()), oids)

    def test_keeps_existing_objects(self):
        catalog = ForeignCatalog(self.test_dir)
        catalog.create_wrapper("jdbc_pxf_fdw", {"protocol": "jdbc"})
        catalog.create_server("pg", "jdbc_pxf_fdw", {"jdbc_driver": "org.postgresql.Driver"})

        catalog = bootstrap_catalog(self.test_dir)
        jdbc = catalog.get_wrapper_by_name("jdbc_pxf_fdw")
        self.assertEqual(jdbc.exec_location, ExecLocation.ANY)
        self.assertIsNotNone(catalog.get_server_by_name("pg"))

    def test_creates_directory(self):
        path = os.path.join(self.test_dir, "nested", "catalog")
        bootstrap_catalog(path)
        self.assertTrue(os.path.isdir(path))

    def test_wrapper_names(self):
        self.assertEqual(wrapper_name("hdfs"), "hdfs_pxf_fdw")

if __name__ == '__main__':
    unittest.main()
