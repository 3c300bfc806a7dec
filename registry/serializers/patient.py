from rest_framework import serializers

from registry.models import Patient

from .fields import CleanCharField, CommaListField


class PatientSerializer(serializers.Serializer):
    """Registration / edit payload.

    Only the treating doctor is accepted from the client; OPD, hospital
    and the patient code are derived server-side.
    """
    doctorId = serializers.CharField(source='doctor_id', max_length=32)

    fullName = CleanCharField(source='full_name', max_length=255)
    gender = serializers.ChoiceField(choices=Patient.GENDER_CHOICES)
    dob = serializers.DateField(required=False, allow_null=True)
    age = serializers.IntegerField(min_value=0, max_value=150, required=False, allow_null=True)
    bloodGroup = serializers.CharField(source='blood_group', max_length=8, required=False, allow_blank=True)

    mobileNumber = serializers.CharField(source='mobile_number', max_length=32)
    email = serializers.EmailField(required=False, allow_blank=True)
    address = CleanCharField(required=False, allow_blank=True)
    city = CleanCharField(max_length=128, required=False, allow_blank=True)
    state = CleanCharField(max_length=128, required=False, allow_blank=True)
    pinCode = serializers.CharField(source='pin_code', max_length=16, required=False, allow_blank=True)

    weight = serializers.FloatField(min_value=0, required=False, allow_null=True)
    height = serializers.FloatField(min_value=0, required=False, allow_null=True)
    existingConditions = CommaListField(source='existing_conditions', required=False)
    allergies = CommaListField(required=False)
    medications = CommaListField(required=False)
    pastDiseases = CommaListField(source='past_diseases', required=False)
    familyHistory = CleanCharField(source='family_history', required=False, allow_blank=True)

    visitType = serializers.ChoiceField(source='visit_type', choices=Patient.VISIT_CHOICES, required=False)
    appointmentDate = serializers.DateTimeField(source='appointment_date', required=False, allow_null=True)
    symptoms = CleanCharField(required=False, allow_blank=True)

    emergencyContactName = CleanCharField(source='emergency_contact_name', max_length=255,
                                          required=False, allow_blank=True)
    emergencyContactNumber = serializers.CharField(source='emergency_contact_number', max_length=32,
                                                   required=False, allow_blank=True)
    relationWithPatient = serializers.CharField(source='relation_with_patient', max_length=64,
                                                required=False, allow_blank=True)

    def validate_mobileNumber(self, value):
        digits = value.replace(' ', '').replace('-', '').lstrip('+')
        if not digits.isdigit() or len(digits) < 7:
            raise serializers.ValidationError('Enter a valid mobile number.')
        return value.strip()
