import bleach
from rest_framework import serializers

from registry.services import codec


class CleanCharField(serializers.CharField):
    """Free text with any markup stripped."""

    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        return bleach.clean(value, tags=set(), strip=True)


class CommaListField(serializers.Field):
    """Accepts ``"a, b, c"`` or ``["a", "b"]``; stores a clean list."""
    default_error_messages = {'invalid': 'Expected a comma separated string or a list of strings.'}

    def to_internal_value(self, data):
        if not isinstance(data, (str, list, tuple)):
            self.fail('invalid')
        return codec.decode_list(data)

    def to_representation(self, value):
        return list(value or [])


class EncodedRecordsField(serializers.Field):
    """Either the delimited text of a record list or the list itself.

    Text is passed through untouched (the codec decodes it leniently
    later).  A structured list is validated record by record, so an
    explicit record without a name is rejected rather than dropped.
    """
    default_error_messages = {'invalid': 'Expected delimited text or a list of records.'}

    def __init__(self, record_serializer, **kwargs):
        self.record_serializer = record_serializer
        super().__init__(**kwargs)

    def to_internal_value(self, data):
        if isinstance(data, str):
            return data
        if not isinstance(data, list):
            self.fail('invalid')
        records = self.record_serializer(data=data, many=True)
        if not records.is_valid():
            raise serializers.ValidationError(records.errors)
        return [dict(r) for r in records.validated_data]

    def to_representation(self, value):
        return value
