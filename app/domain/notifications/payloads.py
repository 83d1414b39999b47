"""Message texts and satellite payloads for appointment events"""

from typing import Optional

from ... import config
from ...models import Appointment, AppointmentType, Branch, Client

CONFIRMATION_TITLE = "Appointment Confirmed"
REMINDER_TITLE = "Appointment Reminder"
CANCELLATION_TITLE = "Appointment Cancelled"
COMPLETED_TITLE = "Appointment Completed"
STAFF_NEW_APPOINTMENT_TITLE = "New Appointment Created"

DEFAULT_CANCELLATION_REASON = "Not specified"
UNKNOWN_LOCATION = "Not specified"


def display_date(appointment: Appointment) -> str:
    return appointment.appointment_date.strftime("%d/%m/%Y")


def confirmation_message(appointment: Appointment) -> str:
    return f"Your appointment for {display_date(appointment)} at {appointment.appointment_time} has been confirmed"


def reminder_message(appointment: Appointment) -> str:
    return f"Remember your appointment scheduled for {display_date(appointment)} at {appointment.appointment_time}"


def cancellation_message(appointment: Appointment, reason: str) -> str:
    return (
        f"Your appointment of {display_date(appointment)} at {appointment.appointment_time} "
        f"has been cancelled. Reason: {reason}"
    )


def completed_message(appointment: Appointment) -> str:
    return f"Thank you for attending your appointment of {display_date(appointment)} at {appointment.appointment_time}"


def staff_new_appointment_message(appointment: Appointment, client: Client) -> str:
    return (
        f"New appointment #{appointment.appointment_number} for {client.full_name} "
        f"on {display_date(appointment)} at {appointment.appointment_time}"
    )


def _base_data(appointment: Appointment, client: Client, branch: Optional[Branch]) -> dict:
    # Keys follow the satellites' JSON contract
    return {
        "numeroCita": appointment.appointment_number,
        "nombreCliente": client.full_name,
        "fecha": appointment.appointment_date.isoformat(),
        "hora": appointment.appointment_time,
        "ubicacion": branch.name if branch else UNKNOWN_LOCATION,
        "direccion": (branch.address if branch else None) or "",
    }


def confirmation_data(
    appointment: Appointment,
    client: Client,
    branch: Optional[Branch],
    appointment_type: Optional[AppointmentType],
) -> dict:
    data = _base_data(appointment, client, branch)
    data.update(
        {
            "profesional": config.DEFAULT_PROFESSIONAL_NAME,
            "tipoCita": appointment_type.name if appointment_type else "",
            "clienteId": client.client_number,
            "telefono": client.mobile or client.phone or "",
            "direccionCliente": client.address or "",
            "observaciones": appointment.notes or "",
        }
    )
    return data


def reminder_data(appointment: Appointment, client: Client, branch: Optional[Branch]) -> dict:
    data = _base_data(appointment, client, branch)
    data["horasAntes"] = config.REMINDER_HOURS_BEFORE
    return data


def cancellation_data(appointment: Appointment, client: Client, branch: Optional[Branch], reason: str) -> dict:
    data = _base_data(appointment, client, branch)
    data.update({"motivo": reason, "urlReagendar": config.RESCHEDULE_URL})
    return data


def completed_data(
    appointment: Appointment,
    client: Client,
    branch: Optional[Branch],
    appointment_type: Optional[AppointmentType],
) -> dict:
    data = _base_data(appointment, client, branch)
    data.update(
        {
            "tipoCita": appointment_type.name if appointment_type else "",
            "observaciones": appointment.notes or "",
        }
    )
    return data


def appointment_created_event(appointment: Appointment) -> dict:
    return {
        "id": appointment.id,
        "appointmentNumber": appointment.appointment_number,
        "clientId": appointment.client_id,
        "appointmentDate": appointment.appointment_date.isoformat(),
        "appointmentTime": appointment.appointment_time,
        "appointmentTypeId": appointment.appointment_type_id,
        "branchId": appointment.branch_id,
    }
