"""
Demo data for first-run dashboards.

When the backing store has no data for a collection, the persistence gateway
substitutes the matching list below and writes it straight back, so a fresh
install opens on three patients, their examinations and their files.

The records are part of the persisted-state contract: they use the same
camelCase layout the storage keys hold, and must not change between releases.
Each call returns fresh copies, so callers may mutate them.
"""
from typing import Dict, List

DEMO_DOCTOR_NAME = "Dr. Smith"
DEMO_LAB_NAME = "Lab Tech"


def seed_patients() -> List[Dict]:
    return [
        {
            "id": 1,
            "firstName": "John",
            "lastName": "Doe",
            "dateOfBirth": "1985-03-15",
            "gender": "male",
            "phoneNumber": "(555) 123-4567",
            "email": "john.doe@email.com",
            "address": "123 Main Street, Springfield, IL 62701",
            "medicalHistory": "Hypertension (2019), No known allergies, Takes Lisinopril 10mg daily",
            "insuranceInfo": "Blue Cross Blue Shield - Policy #BCBS123456789",
            "emergencyContact": {
                "name": "Jane Doe",
                "relationship": "Spouse",
                "phone": "(555) 123-4568",
            },
            "dateAdded": "2024-01-15T09:00:00.000Z",
            "lastVisit": "2024-08-01T14:30:00.000Z",
            "status": "active",
        },
        {
            "id": 2,
            "firstName": "Jane",
            "lastName": "Smith",
            "dateOfBirth": "1992-07-22",
            "gender": "female",
            "phoneNumber": "(555) 987-6543",
            "email": "jane.smith@email.com",
            "address": "456 Oak Avenue, Springfield, IL 62702",
            "medicalHistory": "Type 2 Diabetes (2021), Penicillin allergy, Takes Metformin 500mg twice daily",
            "insuranceInfo": "Aetna - Policy #AETNA987654321",
            "emergencyContact": {
                "name": "Robert Smith",
                "relationship": "Father",
                "phone": "(555) 987-6544",
            },
            "dateAdded": "2024-02-10T10:15:00.000Z",
            "lastVisit": "2024-07-28T11:00:00.000Z",
            "status": "active",
        },
        {
            "id": 3,
            "firstName": "Robert",
            "lastName": "Johnson",
            "dateOfBirth": "1978-11-08",
            "gender": "male",
            "phoneNumber": "(555) 456-7890",
            "email": "robert.johnson@email.com",
            "address": "789 Pine Street, Springfield, IL 62703",
            "medicalHistory": "High cholesterol (2020), Previous appendectomy (2015), No known allergies",
            "insuranceInfo": "United Healthcare - Policy #UHC456789123",
            "emergencyContact": {
                "name": "Mary Johnson",
                "relationship": "Wife",
                "phone": "(555) 456-7891",
            },
            "dateAdded": "2024-01-28T08:45:00.000Z",
            "lastVisit": "2024-07-15T16:20:00.000Z",
            "status": "active",
        },
    ]


def seed_examinations() -> List[Dict]:
    return [
        {
            "id": 1,
            "patientId": 1,
            "date": "2024-08-01T14:30:00.000Z",
            "type": "routine",
            "bloodPressure": "132/88",
            "heartRate": 78,
            "temperature": 98.6,
            "weight": 185.5,
            "height": "5'10\"",
            "chiefComplaint": "Annual physical examination",
            "physicalFindings": "Normal heart sounds, lungs clear to auscultation bilaterally. Mild hypertension noted.",
            "diagnosis": "Essential hypertension, well-controlled",
            "treatmentPlan": "Continue current Lisinopril 10mg daily. Dietary counseling provided.",
            "followUpInstructions": "Return in 6 months for BP check. Blood work in 3 months.",
            "doctorNotes": "Patient compliant with medication. Discussed lifestyle modifications.",
            "duration": 30,
            "status": "completed",
        },
        {
            "id": 2,
            "patientId": 2,
            "date": "2024-07-28T11:00:00.000Z",
            "type": "follow-up",
            "bloodPressure": "118/76",
            "heartRate": 82,
            "temperature": 98.4,
            "weight": 142.3,
            "height": "5'6\"",
            "chiefComplaint": "Diabetes follow-up, checking blood sugar control",
            "physicalFindings": "No acute distress. Feet examination normal, no signs of neuropathy.",
            "diagnosis": "Type 2 diabetes mellitus, good glycemic control",
            "treatmentPlan": "Continue Metformin 500mg twice daily. HbA1c results reviewed (6.8%).",
            "followUpInstructions": "Return in 3 months. Continue home glucose monitoring.",
            "doctorNotes": "Excellent compliance. Weight stable. Encouraged to continue current regimen.",
            "duration": 20,
            "status": "completed",
        },
        {
            "id": 3,
            "patientId": 3,
            "date": "2024-07-15T16:20:00.000Z",
            "type": "consultation",
            "bloodPressure": "124/82",
            "heartRate": 88,
            "temperature": 98.2,
            "weight": 195.0,
            "height": "6'1\"",
            "chiefComplaint": "Chest discomfort and shortness of breath during exercise",
            "physicalFindings": "Heart rate regular, no murmurs. Lungs clear. No chest wall tenderness.",
            "diagnosis": "Atypical chest pain, likely musculoskeletal. Rule out cardiac etiology.",
            "treatmentPlan": "EKG performed - normal. Stress test ordered. NSAIDs for muscle pain.",
            "followUpInstructions": "Schedule stress test within 2 weeks. Return if symptoms worsen.",
            "doctorNotes": "Low cardiac risk based on age and risk factors. Reassurance provided.",
            "duration": 45,
            "status": "completed",
        },
    ]


def seed_files() -> List[Dict]:
    return [
        {
            "id": 1,
            "patientId": 1,
            "name": "Chest_X-Ray_2024-08-01.jpg",
            "type": "image/jpeg",
            "size": 2048576,
            "category": "imaging",
            "description": "Annual chest X-ray - normal",
            "dateUploaded": "2024-08-01T14:45:00.000Z",
            "uploadedBy": DEMO_DOCTOR_NAME,
            "tags": ["chest", "x-ray", "annual", "normal"],
        },
        {
            "id": 2,
            "patientId": 1,
            "name": "Lab_Results_2024-07-30.pdf",
            "type": "application/pdf",
            "size": 512000,
            "category": "lab-results",
            "description": "Comprehensive metabolic panel and lipid panel",
            "dateUploaded": "2024-07-30T09:15:00.000Z",
            "uploadedBy": DEMO_LAB_NAME,
            "tags": ["lab", "blood-work", "metabolic", "lipid"],
        },
        {
            "id": 3,
            "patientId": 2,
            "name": "HbA1c_Results_2024-07-25.pdf",
            "type": "application/pdf",
            "size": 256000,
            "category": "lab-results",
            "description": "Hemoglobin A1c test results",
            "dateUploaded": "2024-07-25T10:30:00.000Z",
            "uploadedBy": DEMO_LAB_NAME,
            "tags": ["diabetes", "hba1c", "glucose", "lab"],
        },
        {
            "id": 4,
            "patientId": 3,
            "name": "EKG_2024-07-15.pdf",
            "type": "application/pdf",
            "size": 1024000,
            "category": "cardiac",
            "description": "12-lead electrocardiogram",
            "dateUploaded": "2024-07-15T16:30:00.000Z",
            "uploadedBy": DEMO_DOCTOR_NAME,
            "tags": ["ekg", "cardiac", "heart", "rhythm"],
        },
    ]
