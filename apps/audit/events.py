class AuditEvents:
    # Tasks
    TASK_CREATED = "task_created"
    TASK_UPDATED = "task_updated"
    TASK_UPDATE_DENIED = "task_update_denied"
    TASK_TICKED = "task_ticked"
    TASK_UNTICKED = "task_unticked"
    TASK_APPROVED = "task_approved"
    TASK_REJECTED = "task_rejected"
    TASK_DEADLINE_PASSED = "task_deadline_passed"
    TASK_SAVE_CONFLICT = "task_save_conflict"
    TASK_CYCLE_ARCHIVED = "task_cycle_archived"
    TASK_DEADLINE_SWEEP_RUN = "task_deadline_sweep_run"
    TASK_RECURRENCE_RESET_RUN = "task_recurrence_reset_run"

    # Fines
    CUSTOM_FINE_CREATED = "custom_fine_created"
    CUSTOM_FINE_UPDATED = "custom_fine_updated"
    CUSTOM_FINE_APPLIED = "custom_fine_applied"
    CUSTOM_FINES_RUN = "custom_fines_run"
    CUSTOM_FINE_RECORD_DELETED = "custom_fine_record_deleted"
    DAILY_TASK_NA_MARKED = "daily_task_na_marked"

    # Payroll
    COMPENSATION_COMPUTED = "compensation_computed"
    COMPENSATION_OVERRIDE_SET = "compensation_override_set"
    COMPENSATION_RECALCULATED = "compensation_recalculated"
    LEDGER_ENTRY_CREATED = "ledger_entry_created"
