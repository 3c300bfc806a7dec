"""
URL mappings for the clinic API.

Paths follow the front-end client; trailing slashes are omitted.
"""
from django.urls import include, path

from .views import health
from .views.dashboard import dashboard
from .views.doctors import doctor_detail, list_doctors, opd_doctors
from .views.hospitals import hospital_detail, list_hospitals, register_hospital
from .views.opds import hospital_opds, list_opds
from .views.patients import list_patients, patient_detail, patient_register, recent_patients
from .views.prescriptions import create_prescription, list_prescriptions, prescription_detail

urlpatterns = [
    # Hospitals and their OPDs
    path('api/hospitals/register', register_hospital),
    path('api/hospitals', list_hospitals),
    path('api/hospitals/<str:hospital_id>', hospital_detail),
    path('api/hospitals/<str:hospital_id>/opds', hospital_opds),
    # OPDs and their doctors
    path('api/opds', list_opds),
    path('api/opds/<str:opd_id>/doctors', opd_doctors),
    path('api/doctors', list_doctors),
    path('api/doctors/<str:doctor_id>', doctor_detail),
    # Patients
    path('api/patients/register', patient_register),
    path('api/patients/recent', recent_patients),
    path('api/patients', list_patients),
    path('api/patients/<str:patient_id>', patient_detail),
    # Prescriptions
    path('api/prescriptions/create', create_prescription),
    path('api/prescriptions', list_prescriptions),
    path('api/prescriptions/<str:prescription_id>', prescription_detail),

    path('api/dashboard', dashboard),
    path('healthz', health.healthz),
    path('', include('django_prometheus.urls')),
]
