"""Demo records used when a collection has never been stored."""

from typing import List

from app.models import Doctor, HospitalResource, Role, User


def _doctor(
    doc_id: str,
    name: str,
    specialty: str,
    bio: str,
    experience: int,
    days: List[str],
    slots: List[str],
) -> Doctor:
    return Doctor(
        id=doc_id,
        name=name,
        specialty=specialty,
        bio=bio,
        image=f"https://picsum.photos/seed/doc{doc_id[1:]}/200/200",
        experience=experience,
        available_days=days,
        time_slots=slots,
    )


def demo_admin() -> User:
    return User(
        id="admin1",
        name="Super Admin",
        email="admin@medicore.com",
        password="admin",
        role=Role.ADMIN,
        avatar="https://picsum.photos/seed/admin/100/100",
    )


def demo_doctors() -> List[Doctor]:
    return [
        _doctor("d1", "Dr. Sarah Jenkins", "Cardiology",
                "Top-rated cardiologist with over 15 years of experience in heart health.",
                15, ["Mon", "Wed", "Fri"], ["09:00", "10:00", "11:00", "14:00"]),
        _doctor("d2", "Dr. Michael Chen", "Pediatrics",
                "Compassionate pediatrician loved by kids and trusted by parents.",
                8, ["Tue", "Thu", "Sat"], ["09:00", "10:30", "13:00", "15:30"]),
        _doctor("d3", "Dr. Emily Stone", "Dermatology",
                "Expert in skin care, acne treatment, and cosmetic procedures.",
                12, ["Mon", "Tue", "Thu", "Fri"], ["10:00", "11:00", "14:00", "16:00"]),
        _doctor("d4", "Dr. James Wilson", "Neurology",
                "Specializes in treating disorders of the nervous system with advanced therapies.",
                20, ["Mon", "Thu"], ["11:00", "13:00", "15:00"]),
        _doctor("d5", "Dr. Linda Martinez", "Orthopedics",
                "Expert in bone, joint, and muscle health, helping you move without pain.",
                10, ["Tue", "Wed", "Fri"], ["09:00", "12:00", "16:00"]),
        _doctor("d6", "Dr. Robert Kim", "General Surgery",
                "Skilled surgeon dedicated to providing safe and effective surgical procedures.",
                14, ["Mon", "Tue", "Wed", "Thu", "Fri"], ["08:00", "10:00", "14:00"]),
        _doctor("d7", "Dr. Susan Lee", "Psychiatry",
                "Empathetic psychiatrist helping patients achieve mental wellness and balance.",
                9, ["Mon", "Wed", "Thu"], ["10:00", "11:30", "14:00"]),
        _doctor("d8", "Dr. David Patel", "Ophthalmology",
                "Vision care specialist focused on eye health and corrective surgeries.",
                18, ["Tue", "Thu", "Fri"], ["09:00", "11:00", "15:00"]),
        _doctor("d9", "Dr. Olivia Brown", "Oncology",
                "Dedicated oncologist providing comprehensive cancer care and support.",
                22, ["Mon", "Tue", "Wed"], ["08:30", "12:00", "14:30"]),
        _doctor("d10", "Dr. William Davis", "ENT",
                "Specialist in Ear, Nose, and Throat conditions for both adults and children.",
                11, ["Wed", "Thu", "Fri"], ["09:30", "13:00", "16:30"]),
    ]


def demo_resources() -> List[HospitalResource]:
    return [
        HospitalResource(id="r1", name="General Bed", type="Bed", price=1500, total_stock=50),
        HospitalResource(id="r2", name="ICU Bed", type="Bed", price=8000, total_stock=10),
        HospitalResource(id="r3", name="Oxygen Cylinder", type="Oxygen", price=500, total_stock=30),
        HospitalResource(id="r4", name="Ventilator", type="Equipment", price=5000, total_stock=8),
        HospitalResource(id="r5", name="Wheelchair", type="Equipment", price=200, total_stock=20),
    ]
