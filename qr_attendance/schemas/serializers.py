"""Response shapes shared by the routers (camelCase, as the mobile client expects)."""


def serialize_student(student) -> dict:
    return {
        "id": student.id,
        "fullName": student.full_name,
        "email": student.email,
        "enrollmentNumber": student.enrollment_number,
        "branch": student.branch,
        "year": student.year,
    }


def serialize_teacher(teacher) -> dict:
    return {
        "id": teacher.id,
        "fullName": teacher.full_name,
        "email": teacher.email,
        "department": teacher.department,
        "employeeId": teacher.employee_id,
    }


def serialize_admin(admin) -> dict:
    return {"id": admin.id, "fullName": admin.full_name, "email": admin.email}


def serialize_subject(subject) -> dict:
    return {
        "id": subject.id,
        "subject_name": subject.subject_name,
        "subject_code": subject.subject_code,
        "department": subject.department,
        "semester": subject.semester,
        "credits": subject.credits,
    }


def serialize_device_request(request) -> dict:
    return {
        "id": request.id,
        "studentId": request.student_id,
        "currentDeviceId": request.current_device_id,
        "newDeviceId": request.new_device_id,
        "reason": request.reason,
        "status": request.status,
        "adminNotes": request.admin_notes,
        "createdAt": request.created_at,
        "decidedAt": request.decided_at,
    }
