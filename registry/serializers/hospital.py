from rest_framework import serializers

from .fields import CleanCharField, CommaListField


class HospitalSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255)
    address = CleanCharField(required=False, allow_blank=True)
    # Alternative to ``address`` used by the registration form
    addressLine1 = CleanCharField(required=False, allow_blank=True, write_only=True)
    addressLine2 = CleanCharField(required=False, allow_blank=True, write_only=True)
    city = CleanCharField(required=False, allow_blank=True, write_only=True)
    state = CleanCharField(required=False, allow_blank=True, write_only=True)
    pinCode = CleanCharField(required=False, allow_blank=True, write_only=True)
    contactNumber = serializers.CharField(source='contact_number', max_length=32, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)
    licenseNumber = serializers.CharField(source='license_number', max_length=64, required=False, allow_blank=True)
    hospitalType = serializers.CharField(source='hospital_type', max_length=64, required=False, allow_blank=True)
    opdDepartments = CommaListField(source='opd_departments', required=False)

    ADDRESS_PARTS = ('addressLine1', 'addressLine2', 'city', 'state', 'pinCode')

    def validate(self, attrs):
        parts = {k: attrs.pop(k, '') for k in self.ADDRESS_PARTS}
        if not attrs.get('address') and any(parts.values()):
            street = ', '.join(p for p in (parts['addressLine1'], parts['addressLine2'], parts['city']) if p)
            attrs['address'] = f"{street}, {parts['state']} - {parts['pinCode']}".strip(' ,-')
        return attrs


class OpdSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255)
    roomNumber = serializers.CharField(source='room_number', max_length=32, required=False, allow_blank=True)
    timings = serializers.CharField(max_length=128, required=False, allow_blank=True)
    operationDays = CommaListField(source='operation_days', required=False)
    departmentHead = CleanCharField(source='department_head', max_length=255, required=False, allow_blank=True)


class DoctorSerializer(serializers.Serializer):
    name = CleanCharField(max_length=255)
    email = serializers.EmailField(required=False, allow_blank=True)
    mobileNumber = serializers.CharField(source='mobile_number', max_length=32, required=False, allow_blank=True)
    specialization = CleanCharField(max_length=255, required=False, allow_blank=True)
    availableTimeSlots = CommaListField(source='available_time_slots', required=False)
    qualification = CleanCharField(max_length=255, required=False, allow_blank=True)
    experienceYears = serializers.IntegerField(source='experience_years', min_value=0, max_value=80, required=False)
    doctorLicenseId = serializers.CharField(source='doctor_license_id', max_length=64, required=False, allow_blank=True)
