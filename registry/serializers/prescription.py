from django.conf import settings
from rest_framework import serializers

from registry.drawing import TOOL_ERASER, TOOL_PEN, decode_payload
from registry.drawing.raster import is_valid_color
from registry.services.codec import URGENCY_CHOICES
from registry.services.prescriptions import STATUSES, VISIT_TYPES

from .fields import CleanCharField, CommaListField, EncodedRecordsField


class PointSerializer(serializers.Serializer):
    x = serializers.FloatField()
    y = serializers.FloatField()
    pressure = serializers.FloatField(required=False, allow_null=True)


class StrokeSerializer(serializers.Serializer):
    points = PointSerializer(many=True, allow_empty=False)
    color = serializers.CharField(max_length=32, required=False)
    width = serializers.FloatField(required=False)
    tool = serializers.ChoiceField(choices=(TOOL_PEN, TOOL_ERASER), default=TOOL_PEN)

    def validate_color(self, value):
        if not is_valid_color(value):
            raise serializers.ValidationError('Unknown color.')
        return value

    def validate_width(self, value):
        if value <= 0:
            raise serializers.ValidationError('Width must be positive.')
        return value


class MedicationSerializer(serializers.Serializer):
    medicineName = serializers.CharField(max_length=255)
    dosage = serializers.CharField(max_length=128, required=False, allow_blank=True)
    frequency = serializers.CharField(max_length=128, required=False, allow_blank=True)
    duration = serializers.CharField(max_length=128, required=False, allow_blank=True)
    instructions = serializers.CharField(required=False, allow_blank=True)
    quantity = serializers.IntegerField(min_value=0, required=False, allow_null=True)


class LabTestSerializer(serializers.Serializer):
    testName = serializers.CharField(max_length=255)
    instructions = serializers.CharField(required=False, allow_blank=True)
    urgency = serializers.ChoiceField(choices=URGENCY_CHOICES, default=URGENCY_CHOICES[0])


class PrescriptionFormSerializer(serializers.Serializer):
    """Validates the raw prescription form.

    Keys stay in their camelCase form; decoding into model fields is
    done by :func:`registry.services.prescriptions.clinical_fields`.
    Selection checks are left to the assembler, so blank ids pass here.
    """
    patientId = serializers.CharField(max_length=32, required=False, allow_blank=True)
    doctorId = serializers.CharField(max_length=32, required=False, allow_blank=True)

    visitDate = serializers.DateTimeField(required=False, allow_null=True)
    visitType = serializers.ChoiceField(choices=VISIT_TYPES, required=False)
    followUpDate = serializers.DateTimeField(required=False, allow_null=True)
    chiefComplaint = CleanCharField(required=False, allow_blank=True)
    symptoms = CommaListField(required=False)
    diagnosis = CommaListField(required=False)
    clinicalNotes = CleanCharField(required=False, allow_blank=True)
    medications = EncodedRecordsField(MedicationSerializer, required=False)
    labTests = EncodedRecordsField(LabTestSerializer, required=False)
    prescriptionText = CleanCharField(required=False, allow_blank=True)
    followUpInstructions = CleanCharField(required=False, allow_blank=True)
    vitalSigns = serializers.DictField(required=False)
    status = serializers.ChoiceField(choices=STATUSES, required=False)

    strokes = StrokeSerializer(many=True, required=False)
    prescriptionCanvas = serializers.CharField(required=False, allow_blank=True, trim_whitespace=True)

    def validate_strokes(self, value):
        if len(value) > settings.CANVAS_MAX_STROKES:
            raise serializers.ValidationError(f'At most {settings.CANVAS_MAX_STROKES} strokes are accepted.')
        return value

    def validate_prescriptionCanvas(self, value):
        if value:
            try:
                decode_payload(value)
            except ValueError:
                raise serializers.ValidationError('Not a valid image payload.')
        return value
