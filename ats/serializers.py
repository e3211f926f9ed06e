"""
ATS Serializers - REST API serialization for positions, applications and interviews

Output serializers are read-only; write operations are validated by the
input serializers below and executed by the services in ``ats.services`` and
``ats.scheduling``.
"""

from rest_framework import serializers

from accounts.models import CandidateProfile

from .models import Application, Interview, Position
from .scheduling import MODE_ALIASES


# ==================== POSITIONS ====================

class PositionSerializer(serializers.ModelSerializer):
    agency_name = serializers.CharField(source='agency.name', read_only=True)

    class Meta:
        model = Position
        fields = [
            'id', 'uuid', 'agency', 'agency_name', 'title', 'description',
            'status', 'visibility', 'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'uuid', 'agency', 'agency_name', 'created_at', 'updated_at']


class PositionSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Position
        fields = ['id', 'title', 'agency']
        read_only_fields = fields


# ==================== CANDIDATES ====================

class CandidateSummarySerializer(serializers.ModelSerializer):
    email = serializers.EmailField(source='user.email', read_only=True)

    class Meta:
        model = CandidateProfile
        fields = ['id', 'first_name', 'last_name', 'email', 'headline']
        read_only_fields = fields


# ==================== INTERVIEWS ====================

class InterviewSerializer(serializers.ModelSerializer):
    class Meta:
        model = Interview
        fields = [
            'id', 'uuid', 'application', 'scheduled_at', 'mode', 'location',
            'details', 'status', 'created_at',
        ]
        read_only_fields = fields


class ScheduleInterviewSerializer(serializers.Serializer):
    """
    Input for scheduling an interview.

    Accepts ``scheduledAt`` as well as ``scheduled_at`` for the start time.
    """

    scheduled_at = serializers.DateTimeField()
    mode = serializers.ChoiceField(choices=Interview.InterviewMode.values + list(MODE_ALIASES))
    location = serializers.CharField(required=False, allow_blank=True, max_length=500, default='')
    details = serializers.CharField(required=False, allow_blank=True, default='')

    def to_internal_value(self, data):
        if 'scheduledAt' in data and 'scheduled_at' not in data:
            data = data.copy()
            data['scheduled_at'] = data['scheduledAt']
        return super().to_internal_value(data)


# ==================== APPLICATIONS ====================

class ApplicationSerializer(serializers.ModelSerializer):
    position = PositionSummarySerializer(read_only=True)
    candidate = CandidateSummarySerializer(read_only=True)
    interviews = InterviewSerializer(many=True, read_only=True)

    class Meta:
        model = Application
        fields = [
            'id', 'uuid', 'status', 'notes', 'position', 'candidate',
            'interviews', 'created_at', 'updated_at',
        ]
        read_only_fields = fields


class CandidateApplicationSerializer(serializers.ModelSerializer):
    """Application as seen by the candidate (agency notes are private)."""

    position = PositionSummarySerializer(read_only=True)
    agency_name = serializers.CharField(source='position.agency.name', read_only=True)
    interviews = InterviewSerializer(many=True, read_only=True)

    class Meta:
        model = Application
        fields = ['id', 'uuid', 'status', 'position', 'agency_name', 'interviews', 'created_at', 'updated_at']
        read_only_fields = fields


class ApplySerializer(serializers.Serializer):
    position_id = serializers.IntegerField()


class AddToPipelineSerializer(serializers.Serializer):
    position_id = serializers.IntegerField()
    candidate_id = serializers.IntegerField()


class ApplicationUpdateSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Application.ApplicationStatus.choices, required=False)
    notes = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        if not attrs:
            raise serializers.ValidationError("Provide a status or notes to update.")
        return attrs


class InterviewPipelineSerializer(serializers.Serializer):
    scheduled = ApplicationSerializer(many=True, read_only=True)
    unscheduled = ApplicationSerializer(many=True, read_only=True)
    jobs_in_pipeline = serializers.ListField(child=serializers.DictField(), read_only=True)


class InterviewPipelineQuerySerializer(serializers.Serializer):
    position = serializers.IntegerField(required=False)
