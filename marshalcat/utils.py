import json
import unittest

from marshalcat.encoder import dumps
from marshalcat.field import MarshalError


def compare_json_keys(data, keys):
    """Check that the decoded JSON object `data` has exactly the given keys,
    recursing into nested dicts given as values."""
    if isinstance(keys, list):
        keys = dict((key, None) for key in keys)
    for k, v in keys.items():
        assert k in data, 'Key %r not in %r' % (k, data)
        if isinstance(v, dict):
            compare_json_keys(data[k], v)
    for k in data:
        assert k in keys, 'Key %r is unexpected in %r' % (k, data)


class MarshalTestCase(unittest.TestCase):
    def assertMarshals(self, value, expected, **options):
        """Assert that `value` encodes to exactly the text `expected`."""
        self.assertEqual(dumps(value, **options), expected)

    def assertMarshalsKeys(self, value, keys, **options):
        """Assert that `value` encodes to an object with exactly `keys`."""
        compare_json_keys(json.loads(dumps(value, **options)), keys)

    def assertMarshalFails(self, value, msg=None, field=None, **options):
        with self.assertRaises(MarshalError) as ctx:
            dumps(value, **options)
        if msg is not None:
            self.assertIn(msg, ctx.exception.error.msg)
        if field is not None:
            self.assertEqual(ctx.exception.error.field, field)
        return ctx.exception.error
