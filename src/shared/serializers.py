from rest_framework import serializers


class StrictFieldsMixin:
    """Reject request bodies that carry keys the serializer does not declare.

    Read-only fields count as declared, so clients echoing a fetched record
    back are accepted; the read-only values are simply ignored.
    """

    def to_internal_value(self, data):
        if hasattr(data, "keys"):
            unknown = sorted(set(data.keys()) - set(self.fields.keys()))
            if unknown:
                raise serializers.ValidationError(
                    {key: ["Unknown field."] for key in unknown}
                )
        return super().to_internal_value(data)
